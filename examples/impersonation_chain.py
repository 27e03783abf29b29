"""
Impersonation Example - Act as another service account, cached in Redis.
"""

import sys

from gcp_credkit import CredentialsFactory
from gcp_credkit.adapters import RedisCacheAdapter


def main():
    if len(sys.argv) < 2:
        print("usage: impersonation_chain.py TARGET_SERVICE_ACCOUNT [DELEGATE ...]")
        sys.exit(1)

    target, delegates = sys.argv[1], sys.argv[2:]

    factory = CredentialsFactory(cache=RedisCacheAdapter(prefix="example:credkit:"))

    # Caller's own credentials, then the target on top
    source = factory.make_cached_credentials(factory.make_application_default_credentials())
    impersonated = factory.make_cached_credentials(
        factory.make_impersonated_credentials(source, target, delegates)
    )

    token = impersonated.fetch_access_token(["https://www.googleapis.com/auth/devstorage.read_only"])
    print(f"Token for {impersonated.fetch_service_account_email()}")
    print(f"Scope: {token.scope}")
    print(f"Expires at: {token.expires_at.isoformat()}")

    # Second call is served from Redis
    again = impersonated.fetch_access_token(["https://www.googleapis.com/auth/devstorage.read_only"])
    print(f"Cached: {again == token}")


if __name__ == "__main__":
    main()
