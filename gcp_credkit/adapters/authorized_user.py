"""
Authorized User Credentials - Refresh token grant for end-user credentials.
"""

import hashlib
from typing import Any, Dict, List, Mapping, Optional

import httpx

from gcp_credkit.adapters.oauth2_credentials import OAuth2Credentials
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import ConfigurationError, UnsupportedOperationError
from gcp_credkit.domain.tokens import SignatureResult


class AuthorizedUserCredentials(OAuth2Credentials):
    """
    Credentials from a gcloud user login ("type": "authorized_user").

    Users have no project or service account and no private key, so
    all optional capabilities are unsupported.
    """

    REFRESH_TOKEN_GRANT_TYPE = "refresh_token"

    REQUIRED_FIELDS = ("client_id", "client_secret", "refresh_token")

    def __init__(self, http_client: httpx.Client, info: Mapping[str, Any]):
        """
        Initialize from parsed authorized user credentials.

        Raises:
            ConfigurationError: Not authorized user credentials, or a required field is empty
        """
        super().__init__(http_client)

        if not self.is_authorized_user(info):
            raise ConfigurationError("Argument does not appear to be authorized user credentials")

        for name in self.REQUIRED_FIELDS:
            if not info.get(name):
                raise ConfigurationError(
                    f"Authorized user credentials has missing or empty '{name}' field",
                    details={"field": name},
                )

        self._client_id = str(info["client_id"])
        self._client_secret = str(info["client_secret"])
        self._refresh_token = str(info["refresh_token"])
        self._quota_project_id: Optional[str] = (
            str(info["quota_project_id"]) if info.get("quota_project_id") else None
        )

    @staticmethod
    def is_authorized_user(info: Mapping[str, Any]) -> bool:
        return info.get("type") == "authorized_user"

    @property
    def quota_project_id(self) -> Optional[str]:
        """Project billed for API quota, if the user configured one."""
        return self._quota_project_id

    def fetch_project_id(self) -> str:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support fetch_project_id")

    def fetch_service_account_email(self) -> str:
        raise UnsupportedOperationError(
            f"{type(self).__name__} does not support fetch_service_account_email"
        )

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support generate_signature")

    def supports_capability(self, capability: Capability) -> bool:
        return False

    def extend_cache_key(self) -> List[str]:
        """
        Client ID plus a digest of the refresh token.

        gcloud logins share one client ID, so the refresh token is what
        tells two users apart. Only its digest leaves this object.
        """
        return [self._client_id, hashlib.sha256(self._refresh_token.encode("utf-8")).hexdigest()]

    def _grant_type(self) -> str:
        return self.REFRESH_TOKEN_GRANT_TYPE

    def _assert_claims(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        asserted = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "refresh_token": self._refresh_token,
        }
        asserted.update(claims)
        return asserted
