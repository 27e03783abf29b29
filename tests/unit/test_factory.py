"""
Unit tests for CredentialsFactory.
"""

import httpx

from gcp_credkit.adapters.application_default import ApplicationDefaultCredentials
from gcp_credkit.adapters.authorized_user import AuthorizedUserCredentials
from gcp_credkit.adapters.cached import CachedCredentials
from gcp_credkit.adapters.impersonated import ImpersonatedCredentials
from gcp_credkit.adapters.impersonation_fallback import ImpersonationFallbackCredentials
from gcp_credkit.adapters.memory_cache import MemoryCacheAdapter
from gcp_credkit.adapters.metadata_server import MetadataServerCredentials
from gcp_credkit.adapters.service_account_key import ServiceAccountKeyCredentials
from gcp_credkit.domain.capability import Capability
from gcp_credkit.sdk.factory import CredentialsFactory


class TestCredentialsFactory:
    """Test construction of sources and decorators."""

    def test_default_http_client(self):
        """Test a client is created when none is given."""
        factory = CredentialsFactory()

        assert isinstance(factory.http_client, httpx.Client)

    def test_sources(self, service_account_info, authorized_user_info):
        """Test concrete source construction."""
        factory = CredentialsFactory(httpx.Client())

        assert isinstance(factory.make_service_account_key(service_account_info), ServiceAccountKeyCredentials)
        assert isinstance(
            factory.make_authorized_user_credentials(authorized_user_info), AuthorizedUserCredentials
        )
        assert isinstance(factory.make_metadata_server_credentials(), MetadataServerCredentials)

    def test_impersonated(self, stub_credentials):
        """Test impersonation target and delegates are passed through."""
        factory = CredentialsFactory(httpx.Client())

        credentials = factory.make_impersonated_credentials(
            stub_credentials(), "target@example.com", ["delegate@example.com"]
        )

        assert isinstance(credentials, ImpersonatedCredentials)
        assert credentials.target == "target@example.com"
        assert credentials.delegates == ["delegate@example.com"]

    def test_cached_uses_default_cache(self, frozen_clock, stub_credentials):
        """Test cached credentials share the factory's cache unless overridden."""
        cache = MemoryCacheAdapter()
        factory = CredentialsFactory(httpx.Client(), cache=cache)

        factory.make_cached_credentials(stub_credentials()).fetch_access_token(["scope-a"])
        assert len(cache) == 1

        other = MemoryCacheAdapter()
        factory.make_cached_credentials(stub_credentials(), other).fetch_access_token(["scope-a"])
        assert len(other) == 1
        assert len(cache) == 1

    def test_empty_caller_cache_is_used(self, frozen_clock, stub_credentials):
        """Test an empty cache passed by the caller receives entries."""
        default_cache = MemoryCacheAdapter()
        factory = CredentialsFactory(httpx.Client(), cache=default_cache)

        factory.make_cached_credentials(stub_credentials()).fetch_access_token(["scope-a"])
        assert len(default_cache) == 1

        explicit_cache = MemoryCacheAdapter()
        factory.make_cached_credentials(stub_credentials(), cache=explicit_cache).fetch_access_token(["scope-b"])
        assert len(explicit_cache) == 1
        assert len(default_cache) == 1

    def test_fallback_uses_factory_for_impersonation(self, stub_credentials):
        """Test the fallback decorator builds impersonation through this factory."""
        factory = CredentialsFactory(httpx.Client())
        source = stub_credentials()

        credentials = factory.make_credentials_with_impersonation_fallback(source, "fallback@example.com")

        assert isinstance(credentials, ImpersonationFallbackCredentials)
        assert credentials.fetch_service_account_email() == "fallback@example.com"
        assert credentials.supports_capability(Capability.CAN_GENERATE_SIGNATURE)

    def test_application_default_uses_factory_environ(self, tmp_path):
        """Test the resolver sees the environment given to the factory."""
        factory = CredentialsFactory(httpx.Client(), environ={"HOME": str(tmp_path)})

        credentials = factory.make_application_default_credentials()
        credentials.supports_capability(Capability.CAN_FETCH_PROJECT_ID)

        assert isinstance(credentials, ApplicationDefaultCredentials)
        assert credentials.credentials_class is MetadataServerCredentials

    def test_cached_application_default_is_lazy(self):
        """Test wrapping the resolver does not trigger resolution."""
        factory = CredentialsFactory(httpx.Client(), environ={})
        credentials = factory.make_cached_credentials(factory.make_application_default_credentials())

        assert isinstance(credentials, CachedCredentials)
        assert isinstance(credentials.source, ApplicationDefaultCredentials)
        assert credentials.source.credentials_class is None
