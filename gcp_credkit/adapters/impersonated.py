"""
Impersonated Credentials - Act as a target service account via IAM Credentials.

A source credential obtains a cloud-platform access token, which is then
presented to the IAM Credentials REST API to mint tokens and signatures
for the target, optionally through a chain of delegates.
"""

import base64
from typing import Any, Dict, List, Optional, Sequence

import httpx

from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import UnsupportedOperationError, UpstreamResponseError
from gcp_credkit.domain.timestamps import parse_rfc3339
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.credentials_port import CredentialsPort, qualified_name

logger = get_logger(__name__)


class ImpersonatedCredentials(CredentialsPort):
    """
    Short-lived credentials for a target service account.

    The source principal needs roles/iam.serviceAccountTokenCreator on the
    target (or on each delegate in the chain).
    """

    SERVICE_ENDPOINT = "https://iamcredentials.googleapis.com/v1/"

    ACCESS_TOKEN_ACTION = "projects/-/serviceAccounts/{target}:generateAccessToken"
    IDENTITY_TOKEN_ACTION = "projects/-/serviceAccounts/{target}:generateIdToken"
    SIGN_BLOB_ACTION = "projects/-/serviceAccounts/{target}:signBlob"

    IAM_CREDENTIALS_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
    TOKEN_LIFETIME = "3600s"

    def __init__(
        self,
        http_client: httpx.Client,
        source: CredentialsPort,
        target: str,
        delegates: Optional[Sequence[str]] = None,
    ):
        """
        Initialize impersonated credentials.

        Args:
            http_client: HTTP client for IAM Credentials requests
            source: Credentials of the calling principal
            target: Email of the service account to impersonate
            delegates: Service accounts in the delegation chain, in order
        """
        self._http = http_client
        self._source = source
        self._target = target
        self._delegates = list(delegates or [])

    @property
    def target(self) -> str:
        return self._target

    @property
    def delegates(self) -> List[str]:
        return list(self._delegates)

    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        """
        Fetch an access token for the target via generateAccessToken.

        Raises:
            ValueError: scopes is empty
            UpstreamResponseError: Response lacks 'expireTime' or 'accessToken'
        """
        if not scopes:
            raise ValueError("scopes cannot be empty for impersonated credentials")

        data = self._send_iam_credentials_request(
            self.ACCESS_TOKEN_ACTION,
            {"lifetime": self.TOKEN_LIFETIME, "scope": list(scopes)},
        )

        if "expireTime" not in data:
            raise UpstreamResponseError("Response is missing 'expireTime' field")
        if not data.get("accessToken"):
            raise UpstreamResponseError("Response is missing 'accessToken' field")

        try:
            expires_at = parse_rfc3339(str(data["expireTime"]))
        except ValueError as e:
            raise UpstreamResponseError(f"Response has malformed 'expireTime' field: {e}")

        return AccessToken(
            token=str(data["accessToken"]),
            expires_at=expires_at,
            scope=" ".join(scopes),
            token_type="Bearer",
        )

    def fetch_identity_token(self, audience: str) -> IdentityToken:
        """Fetch an identity token for the target via generateIdToken."""
        data = self._send_iam_credentials_request(
            self.IDENTITY_TOKEN_ACTION,
            {"audience": audience, "includeEmail": True},
        )

        if not data.get("token"):
            raise UpstreamResponseError("Response is missing 'token' field")

        return IdentityToken(str(data["token"]))

    def fetch_project_id(self) -> str:
        """Not supported."""
        raise UnsupportedOperationError(f"{type(self).__name__} does not support fetch_project_id")

    def fetch_service_account_email(self) -> str:
        return self._target

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        """Sign bytes as the target via signBlob. The payload is sent base64 encoded."""
        data = self._send_iam_credentials_request(
            self.SIGN_BLOB_ACTION,
            {"payload": base64.b64encode(to_sign).decode("ascii")},
        )

        if "signedBlob" not in data:
            raise UpstreamResponseError("Response is missing 'signedBlob' field")

        return SignatureResult(
            key_id=str(data.get("keyId", "")),
            signature=str(data["signedBlob"]),
        )

    def supports_capability(self, capability: Capability) -> bool:
        return capability in (
            Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL,
            Capability.CAN_GENERATE_SIGNATURE,
        )

    def extend_cache_key(self) -> List[str]:
        """Source type, target and delegates, so impersonation chains never share entries."""
        return [qualified_name(self._source), self._target, *self._delegates]

    def _send_iam_credentials_request(self, action: str, body: Dict[str, Any]) -> Dict[str, Any]:
        source_token = self._source.fetch_access_token(self.IAM_CREDENTIALS_SCOPES)

        if self._delegates:
            body = dict(body, delegates=self._delegates)

        url = self.SERVICE_ENDPOINT + action.format(target=self._target)
        logger.debug("iam_credentials_request", url=url, delegates=len(self._delegates))

        response = self._http.post(
            url,
            json=body,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {source_token.token}",
            },
        )
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamResponseError(f"IAM Credentials returned invalid JSON: {e}")

        if not isinstance(data, dict):
            raise UpstreamResponseError("IAM Credentials returned a non-object JSON body")

        return data
