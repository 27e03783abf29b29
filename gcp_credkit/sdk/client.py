"""
Token Client - Dict-shaped token fetcher bound to fixed scopes.

For code that expects a fetch_auth_token()/sign_blob() style object
rather than a CredentialsPort.
"""

from typing import Any, Dict, Optional, Sequence

from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.tokens import AccessToken
from gcp_credkit.ports.credentials_port import CredentialsPort


class TokenClient:
    """
    High-level client over a credentials source.

    Caching is the source's job: wrap it in CachedCredentials first.

    Example:
        client = TokenClient(
            credentials,
            scopes=["https://www.googleapis.com/auth/cloud-platform"],
        )
        headers = {"Authorization": f"Bearer {client.fetch_auth_token()['access_token']}"}
    """

    def __init__(self, source: CredentialsPort, scopes: Sequence[str]):
        """
        Initialize token client.

        Args:
            source: Credentials to fetch from
            scopes: Scopes requested for every access token
        """
        self._source = source
        self._scopes = list(scopes)
        self._last_received: Optional[AccessToken] = None

    def fetch_auth_token(self) -> Dict[str, Any]:
        """
        Fetch an access token.

        Returns:
            Dict with 'access_token' and 'expires_at' (unix seconds)
        """
        self._last_received = self._source.fetch_access_token(self._scopes)
        return self._as_dict(self._last_received)

    @property
    def last_received_token(self) -> Optional[Dict[str, Any]]:
        """The token from the last fetch_auth_token() call, or None."""
        if self._last_received is None:
            return None
        return self._as_dict(self._last_received)

    def get_client_name(self) -> str:
        """Service account email of the source."""
        return self._source.fetch_service_account_email()

    def get_project_id(self) -> Optional[str]:
        """Project ID of the source, or None if it cannot provide one."""
        if not self._source.supports_capability(Capability.CAN_FETCH_PROJECT_ID):
            return None
        return self._source.fetch_project_id()

    def sign_blob(self, data: bytes) -> str:
        """
        Sign bytes with the source.

        Returns:
            Base64 signature

        Raises:
            UnsupportedOperationError: Source cannot generate signatures
        """
        return self._source.generate_signature(data).signature

    @staticmethod
    def _as_dict(token: AccessToken) -> Dict[str, Any]:
        return {
            "access_token": token.token,
            "expires_at": token.expires_at_timestamp,
        }
