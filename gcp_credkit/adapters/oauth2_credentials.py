"""
OAuth2 Credentials - Shared token-endpoint exchange for grant-based sources.

Subclasses supply the grant type and how the request claims are asserted
(signed JWT assertion, refresh token, ...).
"""

from abc import abstractmethod
from typing import Any, Dict, Optional, Sequence

import httpx

from gcp_credkit.domain import clock
from gcp_credkit.domain.errors import UpstreamResponseError
from gcp_credkit.domain.tokens import AccessToken, IdentityToken
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.credentials_port import CredentialsPort

logger = get_logger(__name__)


class OAuth2Credentials(CredentialsPort):
    """
    Base class for sources that exchange a grant at the OAuth2 token endpoint.

    Access tokens: POST {grant_type, ...asserted claims with 'scope'}
    Identity tokens: POST {grant_type, ...asserted claims with 'target_audience'}
    """

    TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

    def __init__(self, http_client: httpx.Client):
        """
        Initialize OAuth2 credentials.

        Args:
            http_client: HTTP client used for token endpoint requests
        """
        self._http = http_client

    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        """
        Fetch an access token from the OAuth2 token endpoint.

        Raises:
            UpstreamResponseError: Response lacks 'expires_in' or 'access_token'
            httpx.HTTPStatusError: Token endpoint returned 4xx/5xx
        """
        claims: Dict[str, Any] = {}
        if scopes:
            claims["scope"] = " ".join(scopes)

        data = self._send_oauth2_request(claims)

        if "expires_in" not in data:
            raise UpstreamResponseError("Response is missing 'expires_in' field")
        if not data.get("access_token"):
            raise UpstreamResponseError("Response is missing 'access_token' field")

        return AccessToken(
            token=str(data["access_token"]),
            expires_at=clock.calculate_expires_at(int(data["expires_in"])),
            scope=str(data.get("scope", "")),
            token_type=str(data.get("token_type", "Bearer")),
        )

    def fetch_identity_token(self, audience: str) -> IdentityToken:
        """Fetch an identity token for an audience from the OAuth2 token endpoint."""
        data = self._send_oauth2_request({"target_audience": audience})

        if not data.get("id_token"):
            raise UpstreamResponseError("Response is missing 'id_token' field")

        return IdentityToken(str(data["id_token"]))

    def _send_oauth2_request(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        params = {"grant_type": self._grant_type()}
        params.update(self._assert_claims(claims))

        logger.debug("oauth2_token_request", url=self.TOKEN_ENDPOINT, grant_type=params["grant_type"])

        response = self._http.post(
            self.TOKEN_ENDPOINT,
            data=params,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamResponseError(f"Token endpoint returned invalid JSON: {e}")

        if not isinstance(data, dict):
            raise UpstreamResponseError("Token endpoint returned a non-object JSON body")

        return data

    @abstractmethod
    def _grant_type(self) -> str:
        """OAuth2 grant type this source uses."""
        pass

    @abstractmethod
    def _assert_claims(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        """
        Turn request claims into token endpoint form parameters.

        Args:
            claims: 'scope' or 'target_audience' for this request

        Returns:
            Form parameters (excluding grant_type)
        """
        pass
