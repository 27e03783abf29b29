"""
Metadata Server Credentials - Tokens and identity from the platform metadata endpoint.

Available on Compute Engine, GKE, Cloud Run, Cloud Functions and App Engine.
"""

import os
from typing import Any, Dict, Optional, Sequence

import httpx

from gcp_credkit.domain import clock
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import UnsupportedOperationError, UpstreamResponseError
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.credentials_port import CredentialsPort

logger = get_logger(__name__)


class MetadataServerCredentials(CredentialsPort):
    """
    Credentials for the default service account of the running workload.

    All requests are plain GETs with the 'Metadata-Flavor: Google' header.
    No private key is reachable, so signatures are unsupported.
    """

    DEFAULT_HOST = "169.254.169.254"
    HOST_ENV_VAR = "GCE_METADATA_HOST"

    ACCESS_TOKEN_PATH = "instance/service-accounts/default/token"
    IDENTITY_TOKEN_PATH = "instance/service-accounts/default/identity"
    SERVICE_ACCOUNT_PATH = "instance/service-accounts/default/email"
    PROJECT_ID_PATH = "project/project-id"

    def __init__(self, http_client: httpx.Client, host: Optional[str] = None):
        """
        Initialize metadata server credentials.

        Args:
            http_client: HTTP client for metadata requests
            host: Metadata host (default: GCE_METADATA_HOST env or 169.254.169.254)
        """
        self._http = http_client
        self._host = host or os.environ.get(self.HOST_ENV_VAR) or self.DEFAULT_HOST

    @property
    def base_url(self) -> str:
        return f"http://{self._host}/computeMetadata/v1/"

    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        """
        Fetch an access token for the default service account.

        Args:
            scopes: Only honoured on App Engine, Cloud Functions and Cloud Run

        Raises:
            UpstreamResponseError: Response lacks 'expires_in' or 'access_token'
        """
        params = {}
        if scopes:
            params["scopes"] = ",".join(scopes)

        response = self._send_metadata_request(self.ACCESS_TOKEN_PATH, params)

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamResponseError(f"Metadata server returned invalid JSON: {e}")

        if not isinstance(data, dict) or "expires_in" not in data:
            raise UpstreamResponseError("Response is missing 'expires_in' field")
        if not data.get("access_token"):
            raise UpstreamResponseError("Response is missing 'access_token' field")

        return AccessToken(
            token=str(data["access_token"]),
            expires_at=clock.calculate_expires_at(int(data["expires_in"])),
            scope=str(data.get("scope", "")),
            token_type=str(data.get("token_type", "Bearer")),
        )

    def fetch_identity_token(
        self,
        audience: str,
        token_format: str = "",
        licenses: bool = False,
    ) -> IdentityToken:
        """
        Fetch an identity token for the default service account.

        Args:
            audience: Desired 'aud' claim
            token_format: "standard" or "full" ('format' query parameter)
            licenses: Include license codes of the instance (format=full only)
        """
        params: Dict[str, Any] = {"audience": audience}
        if token_format:
            params["format"] = token_format
        if licenses:
            params["licenses"] = "TRUE"

        response = self._send_metadata_request(self.IDENTITY_TOKEN_PATH, params)
        return IdentityToken(response.text.strip())

    def fetch_project_id(self) -> str:
        return self._send_metadata_request(self.PROJECT_ID_PATH).text.strip()

    def fetch_service_account_email(self) -> str:
        return self._send_metadata_request(self.SERVICE_ACCOUNT_PATH).text.strip()

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        """Not supported."""
        raise UnsupportedOperationError(f"{type(self).__name__} does not support generate_signature")

    def supports_capability(self, capability: Capability) -> bool:
        return capability in (
            Capability.CAN_FETCH_PROJECT_ID,
            Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL,
        )

    def _send_metadata_request(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = self.base_url + path
        logger.debug("metadata_request", url=url)

        response = self._http.get(url, params=params or None, headers={"Metadata-Flavor": "Google"})
        response.raise_for_status()
        return response
