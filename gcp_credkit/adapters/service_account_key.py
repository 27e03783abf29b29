"""
Service Account Key Credentials - JWT bearer grant with a JSON key file.

The private key signs the OAuth2 assertion and can sign arbitrary blobs.
"""

import base64
from datetime import timedelta
from typing import Any, Dict, List, Mapping

import httpx
import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from gcp_credkit.adapters.oauth2_credentials import OAuth2Credentials
from gcp_credkit.domain import clock
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import ConfigurationError, SigningError
from gcp_credkit.domain.tokens import SignatureResult


class ServiceAccountKeyCredentials(OAuth2Credentials):
    """
    Credentials from a service account key ("type": "service_account").

    Required fields: client_email, private_key, private_key_id, project_id.
    """

    JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
    JWT_LIFETIME = timedelta(seconds=600)
    JWT_SIGNING_ALGORITHM = "RS256"

    REQUIRED_FIELDS = ("client_email", "private_key", "private_key_id", "project_id")

    def __init__(self, http_client: httpx.Client, info: Mapping[str, Any]):
        """
        Initialize from a parsed service account key.

        Args:
            http_client: HTTP client for the token endpoint
            info: Parsed key file contents

        Raises:
            ConfigurationError: Not a service account key, or a required field is empty
        """
        super().__init__(http_client)

        if not self.is_service_account_key(info):
            raise ConfigurationError("Argument does not appear to be a service account key")

        for name in self.REQUIRED_FIELDS:
            if not info.get(name):
                raise ConfigurationError(
                    f"Service account key has missing or empty '{name}' field",
                    details={"field": name},
                )

        self._client_email = str(info["client_email"])
        self._private_key = str(info["private_key"])
        self._private_key_id = str(info["private_key_id"])
        self._project_id = str(info["project_id"])

    @staticmethod
    def is_service_account_key(info: Mapping[str, Any]) -> bool:
        return info.get("type") == "service_account"

    def fetch_project_id(self) -> str:
        return self._project_id

    def fetch_service_account_email(self) -> str:
        return self._client_email

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        """
        Sign bytes with the private key (RSASSA-PKCS1-v1_5 over SHA-256).

        Raises:
            SigningError: The private key cannot be loaded as an RSA key
        """
        try:
            key = serialization.load_pem_private_key(self._private_key.encode(), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise SigningError(f"Could not load private key: {e}")

        if not isinstance(key, rsa.RSAPrivateKey):
            raise SigningError("Private key is not an RSA key")

        signature = key.sign(to_sign, padding.PKCS1v15(), hashes.SHA256())

        return SignatureResult(
            key_id=self._private_key_id,
            signature=base64.b64encode(signature).decode("ascii"),
        )

    def supports_capability(self, capability: Capability) -> bool:
        return capability in (
            Capability.CAN_FETCH_PROJECT_ID,
            Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL,
            Capability.CAN_GENERATE_SIGNATURE,
        )

    def extend_cache_key(self) -> List[str]:
        """Key identity, so different key files never share entries."""
        return [self._client_email, self._private_key_id]

    def _grant_type(self) -> str:
        return self.JWT_BEARER_GRANT_TYPE

    def _assert_claims(self, claims: Dict[str, Any]) -> Dict[str, Any]:
        iat = clock.now()
        payload = {
            "iss": self._client_email,
            "iat": int(iat.timestamp()),
            "exp": int((iat + self.JWT_LIFETIME).timestamp()),
            "aud": self.TOKEN_ENDPOINT,
        }
        payload.update(claims)

        assertion = jwt.encode(
            payload,
            self._private_key,
            algorithm=self.JWT_SIGNING_ALGORITHM,
            headers={"kid": self._private_key_id},
        )

        return {"assertion": assertion}
