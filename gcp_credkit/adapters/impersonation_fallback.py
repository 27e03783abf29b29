"""
Impersonation Fallback Credentials - Fill capability gaps via impersonation.

Metadata server credentials cannot sign blobs, and on some platforms
(e.g. GKE Workload Identity) cannot mint identity tokens. This decorator
routes those calls through ImpersonatedCredentials acting as the source's
own service account, or an explicitly configured fallback account.
"""

from typing import TYPE_CHECKING, List, Optional, Sequence

import httpx

from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import UnsupportedOperationError
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.credentials_port import CredentialsPort, qualified_name

if TYPE_CHECKING:
    from gcp_credkit.sdk.factory import CredentialsFactory

logger = get_logger(__name__)


class ImpersonationFallbackCredentials(CredentialsPort):
    """
    Decorator that promotes unsupported operations to impersonation.

    - fetch_access_token / fetch_project_id: passthrough
    - fetch_identity_token: passthrough, retried once via impersonation on HTTP 404
    - fetch_service_account_email: fallback account if configured, else passthrough
    - generate_signature: passthrough if supported, else via impersonation
    """

    def __init__(
        self,
        source: CredentialsPort,
        factory: "CredentialsFactory",
        fallback_account: Optional[str] = None,
    ):
        """
        Initialize fallback credentials.

        Args:
            source: Primary credentials
            factory: Factory used to build the impersonated fallback
            fallback_account: Service account to impersonate, or None to use
                the source's own service account email
        """
        self._source = source
        self._factory = factory
        self._fallback_account = fallback_account
        self._lazy_impersonated: Optional[CredentialsPort] = None

    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        return self._source.fetch_access_token(scopes)

    def fetch_identity_token(self, audience: str) -> IdentityToken:
        """
        Fetch an identity token, falling back to impersonation on HTTP 404.

        Any other error propagates unchanged.
        """
        try:
            return self._source.fetch_identity_token(audience)
        except httpx.HTTPStatusError as e:
            if e.response.status_code != httpx.codes.NOT_FOUND:
                raise

            logger.info("identity_token_not_found_using_impersonation", audience=audience)
            return self._get_impersonated().fetch_identity_token(audience)

    def fetch_project_id(self) -> str:
        return self._source.fetch_project_id()

    def fetch_service_account_email(self) -> str:
        if self._fallback_account is not None:
            return self._fallback_account
        return self._source.fetch_service_account_email()

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        if self._source.supports_capability(Capability.CAN_GENERATE_SIGNATURE):
            return self._source.generate_signature(to_sign)
        return self._get_impersonated().generate_signature(to_sign)

    def supports_capability(self, capability: Capability) -> bool:
        if capability == Capability.CAN_FETCH_PROJECT_ID:
            return self._source.supports_capability(capability)

        if capability == Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL:
            return (
                self._source.supports_capability(capability)
                or self._fallback_account is not None
            )

        if capability == Capability.CAN_GENERATE_SIGNATURE:
            return (
                self._source.supports_capability(Capability.CAN_GENERATE_SIGNATURE)
                or self._source.supports_capability(Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL)
                or self._fallback_account is not None
            )

        return False

    def extend_cache_key(self) -> List[str]:
        extra = [qualified_name(self._source), *self._source.extend_cache_key()]
        if self._fallback_account is not None:
            extra = [*extra, self._fallback_account]
        return extra

    def _get_impersonated(self) -> CredentialsPort:
        """Build the impersonated fallback once and reuse it."""
        if self._lazy_impersonated is not None:
            return self._lazy_impersonated

        if self._fallback_account is not None:
            target = self._fallback_account
        elif self._source.supports_capability(Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL):
            target = self._source.fetch_service_account_email()
        else:
            raise UnsupportedOperationError("Could not find service account email to fall back to")

        logger.debug("impersonation_fallback_created", target=target)

        self._lazy_impersonated = self._factory.make_impersonated_credentials(self._source, target)
        return self._lazy_impersonated
