"""
SDK - Factory and high-level client.
"""

from gcp_credkit.sdk.factory import CredentialsFactory
from gcp_credkit.sdk.client import TokenClient

__all__ = [
    "CredentialsFactory",
    "TokenClient",
]
