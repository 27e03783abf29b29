"""
Ports - Interfaces for credential sources and cache stores.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from gcp_credkit.ports.credentials_port import CredentialsPort, qualified_name
from gcp_credkit.ports.cache_port import CachePort, CacheLookup, MISS

__all__ = [
    "CredentialsPort",
    "qualified_name",
    "CachePort",
    "CacheLookup",
    "MISS",
]
