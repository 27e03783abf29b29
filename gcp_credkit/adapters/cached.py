"""
Cached Credentials - Memoize credential results in a cache store.

Tokens are cached until their own expiry; project ID and service account
email are cached without an explicit expiry. Signatures are never cached.
"""

import hashlib
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import UnsupportedOperationError
from gcp_credkit.domain.tokens import AccessToken, ExpiringToken, IdentityToken, SignatureResult
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.cache_port import CachePort
from gcp_credkit.ports.credentials_port import CredentialsPort, qualified_name

logger = get_logger(__name__)

T = TypeVar("T")


class CachedCredentials(CredentialsPort):
    """
    Caching decorator around another credentials source.

    Cache keys combine CACHE_VERSION, the wrapped source's concrete type,
    the operation name, the call arguments and the source's
    extend_cache_key() material, hashed with SHA-256.
    """

    # NOTE: incrementing this invalidates every entry written by older versions.
    CACHE_VERSION = "v1"

    def __init__(self, source: CredentialsPort, cache: CachePort):
        """
        Initialize cached credentials.

        Args:
            source: Credentials to wrap (owned by this decorator)
            cache: Cache store for results
        """
        self._source = source
        self._cache = cache

    @property
    def source(self) -> CredentialsPort:
        return self._source

    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        scopes = list(scopes or [])
        return self._memoize(
            self.make_cache_key("fetch_access_token", *scopes),
            lambda: self._source.fetch_access_token(scopes),
        )

    def fetch_identity_token(self, audience: str) -> IdentityToken:
        return self._memoize(
            self.make_cache_key("fetch_identity_token", audience),
            lambda: self._source.fetch_identity_token(audience),
        )

    def fetch_project_id(self) -> str:
        """
        Fetch the project ID, if the source supports it.

        Raises:
            UnsupportedOperationError: Source lacks CAN_FETCH_PROJECT_ID (cache untouched)
        """
        if not self._source.supports_capability(Capability.CAN_FETCH_PROJECT_ID):
            raise UnsupportedOperationError(
                f"Underlying credentials '{qualified_name(self._source)}' does not support fetch_project_id"
            )

        return self._memoize(
            self.make_cache_key("fetch_project_id"),
            self._source.fetch_project_id,
        )

    def fetch_service_account_email(self) -> str:
        return self._memoize(
            self.make_cache_key("fetch_service_account_email"),
            self._source.fetch_service_account_email,
        )

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        """Generate a signature with the source. Never cached."""
        return self._source.generate_signature(to_sign)

    def supports_capability(self, capability: Capability) -> bool:
        return self._source.supports_capability(capability)

    def extend_cache_key(self) -> List[str]:
        """Wrapped source type and its own key material."""
        return [qualified_name(self._source), *self._source.extend_cache_key()]

    def make_cache_key(self, operation: str, *args: str) -> str:
        """
        Build the cache key for an operation and its arguments.

        Args:
            operation: Operation name (e.g. "fetch_access_token")
            args: Call arguments (scopes, audience)

        Returns:
            Hex SHA-256 digest
        """
        components = [
            self.CACHE_VERSION,
            qualified_name(self._source),
            operation,
            *args,
            *self._source.extend_cache_key(),
        ]
        # NUL cannot appear in scopes, audiences or emails
        return hashlib.sha256("\x00".join(components).encode("utf-8")).hexdigest()

    def _memoize(self, cache_key: str, computation: Callable[[], T]) -> T:
        lookup = self._cache.get(cache_key)
        if lookup.hit:
            logger.debug("credentials_cache_hit", key=cache_key)
            return lookup.value

        logger.debug("credentials_cache_miss", key=cache_key)
        result: Any = computation()

        expires_at = result.expires_at if isinstance(result, ExpiringToken) else None
        self._cache.set(cache_key, result, expires_at=expires_at)

        return result
