"""
Domain Models - Value objects, capabilities and errors.

No infrastructure dependencies beyond token decoding.
"""

from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult
from gcp_credkit.domain.errors import (
    CredentialsError,
    ConfigurationError,
    UnsupportedOperationError,
    UpstreamResponseError,
    InvalidTokenError,
    SigningError,
)

__all__ = [
    "Capability",
    "AccessToken",
    "IdentityToken",
    "SignatureResult",
    "CredentialsError",
    "ConfigurationError",
    "UnsupportedOperationError",
    "UpstreamResponseError",
    "InvalidTokenError",
    "SigningError",
]
