"""
Credentials Port - Interface for short-lived token and signature sources.

Implementations:
- ServiceAccountKeyCredentials: Service account JSON key (JWT bearer grant)
- AuthorizedUserCredentials: Refresh-token based user credentials
- MetadataServerCredentials: Platform metadata endpoint
- ImpersonatedCredentials: IAM Credentials API impersonation

Decorators (wrap another CredentialsPort):
- CachedCredentials: Memoize results in a CachePort
- ImpersonationFallbackCredentials: Divert unsupported operations to impersonation
- ApplicationDefaultCredentials: Pick a source on first use
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult


def qualified_name(obj: object) -> str:
    """Concrete type identity of an object, stable across instances."""
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


class CredentialsPort(ABC):
    """
    Port: Fetch tokens, identity and signatures from a credential source.

    Optional operations are guarded by Capability flags. Calling an
    operation the source does not support raises UnsupportedOperationError.
    """

    @abstractmethod
    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        """
        Fetch an OAuth2 access token.

        Args:
            scopes: Scopes to request; not every source honours them

        Returns:
            Access token with absolute expiry
        """
        pass

    @abstractmethod
    def fetch_identity_token(self, audience: str) -> IdentityToken:
        """
        Fetch a Google-signed identity token.

        Args:
            audience: Desired 'aud' claim

        Returns:
            Identity token with expiry read from its 'exp' claim
        """
        pass

    @abstractmethod
    def fetch_project_id(self) -> str:
        """
        Fetch the project ID the credentials belong to.

        Requires Capability.CAN_FETCH_PROJECT_ID.
        """
        pass

    @abstractmethod
    def fetch_service_account_email(self) -> str:
        """
        Fetch the service account email of the credentials.

        Requires Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL.
        """
        pass

    @abstractmethod
    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        """
        Sign arbitrary bytes with the credentials' key.

        Requires Capability.CAN_GENERATE_SIGNATURE.

        Args:
            to_sign: Bytes to sign

        Returns:
            Key ID and base64 signature
        """
        pass

    @abstractmethod
    def supports_capability(self, capability: Capability) -> bool:
        """
        Check whether an optional operation is supported.

        Args:
            capability: Capability to query

        Returns:
            True if the matching method can be called
        """
        pass

    def extend_cache_key(self) -> List[str]:
        """
        Extra strings that distinguish this instance in a cache key.

        Sources whose results depend on more than their concrete type
        (e.g. impersonation targets) override this.
        """
        return []
