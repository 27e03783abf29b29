"""
gcp_credkit - Short-lived GCP tokens from any credential source

Hexagonal architecture for fetching access tokens, identity tokens and
signatures without callers knowing which credential source is active.

Usage:
    import httpx
    from gcp_credkit import CredentialsFactory, TokenClient

    factory = CredentialsFactory(httpx.Client(timeout=10.0))
    credentials = factory.make_cached_credentials(
        factory.make_credentials_with_impersonation_fallback(
            factory.make_application_default_credentials(),
        ),
    )

    # Access token
    token = credentials.fetch_access_token(
        ["https://www.googleapis.com/auth/cloud-platform"]
    )

    # Identity token
    id_token = credentials.fetch_identity_token("https://my-service.run.app")
"""

__version__ = "0.1.0"

from gcp_credkit.sdk.factory import CredentialsFactory
from gcp_credkit.sdk.client import TokenClient
from gcp_credkit.ports.credentials_port import CredentialsPort
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult

__all__ = [
    "CredentialsFactory",
    "TokenClient",
    "CredentialsPort",
    "Capability",
    "AccessToken",
    "IdentityToken",
    "SignatureResult",
]
