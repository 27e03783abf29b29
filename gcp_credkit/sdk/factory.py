"""
Credentials Factory - Builds sources and decorators that share one HTTP client.
"""

from typing import Any, Mapping, Optional, Sequence

import httpx

from gcp_credkit.adapters.application_default import ApplicationDefaultCredentials
from gcp_credkit.adapters.authorized_user import AuthorizedUserCredentials
from gcp_credkit.adapters.cached import CachedCredentials
from gcp_credkit.adapters.impersonated import ImpersonatedCredentials
from gcp_credkit.adapters.impersonation_fallback import ImpersonationFallbackCredentials
from gcp_credkit.adapters.memory_cache import MemoryCacheAdapter
from gcp_credkit.adapters.metadata_server import MetadataServerCredentials
from gcp_credkit.adapters.service_account_key import ServiceAccountKeyCredentials
from gcp_credkit.ports.cache_port import CachePort
from gcp_credkit.ports.credentials_port import CredentialsPort


class CredentialsFactory:
    """
    Factory for every credentials source and decorator.

    Example:
        factory = CredentialsFactory(httpx.Client(timeout=10.0))

        credentials = factory.make_cached_credentials(
            factory.make_credentials_with_impersonation_fallback(
                factory.make_cached_credentials(
                    factory.make_application_default_credentials(),
                ),
            ),
        )

        token = credentials.fetch_access_token(
            ["https://www.googleapis.com/auth/cloud-platform"]
        )
    """

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        cache: Optional[CachePort] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize factory.

        Args:
            http_client: Shared HTTP client (default: httpx.Client with 10s timeout)
            cache: Default cache for make_cached_credentials (default: in-memory)
            environ: Environment mapping for default credential resolution
        """
        self._http = http_client or httpx.Client(timeout=10.0)
        self._cache = cache if cache is not None else MemoryCacheAdapter()
        self._environ = environ

    @property
    def http_client(self) -> httpx.Client:
        return self._http

    def make_service_account_key(self, info: Mapping[str, Any]) -> ServiceAccountKeyCredentials:
        return ServiceAccountKeyCredentials(self._http, info)

    def make_authorized_user_credentials(self, info: Mapping[str, Any]) -> AuthorizedUserCredentials:
        return AuthorizedUserCredentials(self._http, info)

    def make_metadata_server_credentials(self) -> MetadataServerCredentials:
        return MetadataServerCredentials(self._http)

    def make_impersonated_credentials(
        self,
        source: CredentialsPort,
        target: str,
        delegates: Optional[Sequence[str]] = None,
    ) -> ImpersonatedCredentials:
        return ImpersonatedCredentials(self._http, source, target, delegates)

    def make_cached_credentials(
        self,
        source: CredentialsPort,
        cache: Optional[CachePort] = None,
    ) -> CachedCredentials:
        return CachedCredentials(source, cache if cache is not None else self._cache)

    def make_credentials_with_impersonation_fallback(
        self,
        source: CredentialsPort,
        fallback_account: Optional[str] = None,
    ) -> ImpersonationFallbackCredentials:
        return ImpersonationFallbackCredentials(source, self, fallback_account)

    def make_application_default_credentials(self) -> ApplicationDefaultCredentials:
        return ApplicationDefaultCredentials(self, environ=self._environ)
