"""
Adapters - Implementations of ports.

Credential Sources:
- ServiceAccountKeyCredentials: Service account JSON key
- AuthorizedUserCredentials: gcloud user refresh token
- MetadataServerCredentials: Platform metadata endpoint
- ImpersonatedCredentials: IAM Credentials API impersonation

Decorators:
- CachedCredentials: Memoize results in a cache store
- ImpersonationFallbackCredentials: Divert unsupported calls to impersonation
- ApplicationDefaultCredentials: Resolve a source on first use

Cache Stores:
- MemoryCacheAdapter: In-process cache (testing, single process)
- RedisCacheAdapter: Redis-backed cache
- DynamoDBCacheAdapter: AWS DynamoDB cache
"""

# Credential Sources
from gcp_credkit.adapters.oauth2_credentials import OAuth2Credentials
from gcp_credkit.adapters.service_account_key import ServiceAccountKeyCredentials
from gcp_credkit.adapters.authorized_user import AuthorizedUserCredentials
from gcp_credkit.adapters.metadata_server import MetadataServerCredentials
from gcp_credkit.adapters.impersonated import ImpersonatedCredentials

# Decorators
from gcp_credkit.adapters.cached import CachedCredentials
from gcp_credkit.adapters.impersonation_fallback import ImpersonationFallbackCredentials
from gcp_credkit.adapters.application_default import ApplicationDefaultCredentials

# Cache Stores
from gcp_credkit.adapters.memory_cache import MemoryCacheAdapter
from gcp_credkit.adapters.redis_cache import RedisCacheAdapter
from gcp_credkit.adapters.dynamodb_cache import DynamoDBCacheAdapter

__all__ = [
    # Credential Sources
    "OAuth2Credentials",
    "ServiceAccountKeyCredentials",
    "AuthorizedUserCredentials",
    "MetadataServerCredentials",
    "ImpersonatedCredentials",
    # Decorators
    "CachedCredentials",
    "ImpersonationFallbackCredentials",
    "ApplicationDefaultCredentials",
    # Cache Stores
    "MemoryCacheAdapter",
    "RedisCacheAdapter",
    "DynamoDBCacheAdapter",
]
