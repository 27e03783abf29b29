"""
Default Credentials Example - Tokens and signatures from whatever source is active.
"""

import sys

from gcp_credkit import Capability, CredentialsFactory, TokenClient
from gcp_credkit.logging import configure_logging

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def main():
    configure_logging("debug")

    # Resolve default credentials lazily, with impersonation for missing capabilities
    factory = CredentialsFactory()
    credentials = factory.make_cached_credentials(
        factory.make_credentials_with_impersonation_fallback(
            factory.make_cached_credentials(
                factory.make_application_default_credentials(),
            ),
        ),
    )

    # Access token
    token = credentials.fetch_access_token(SCOPES)
    print(f"Access token expires at: {token.expires_at.isoformat()}")
    print(f"Expired: {token.is_expired()}")

    # Identity token
    audience = sys.argv[1] if len(sys.argv) > 1 else "https://example.com"
    id_token = credentials.fetch_identity_token(audience)
    print(f"\nIdentity token for {audience} expires at: {id_token.expires_at.isoformat()}")

    # Project and service account, if available
    if credentials.supports_capability(Capability.CAN_FETCH_PROJECT_ID):
        print(f"\nProject: {credentials.fetch_project_id()}")
    if credentials.supports_capability(Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL):
        print(f"Service account: {credentials.fetch_service_account_email()}")

    # Signature
    if credentials.supports_capability(Capability.CAN_GENERATE_SIGNATURE):
        result = credentials.generate_signature(b"hello world")
        print(f"\nSignature ({result.key_id}): {result.signature[:40]}...")

    # Dict-shaped client for code that expects fetch_auth_token()
    client = TokenClient(credentials, SCOPES)
    print(f"\nTokenClient expires_at: {client.fetch_auth_token()['expires_at']}")


if __name__ == "__main__":
    main()
