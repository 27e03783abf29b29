"""
Application Default Credentials - Pick a credentials source on first use.

Probe order:
1. File named by GOOGLE_APPLICATION_CREDENTIALS
2. $HOME/.config/gcloud/application_default_credentials.json
3. Metadata server

Loading is deferred until the first operation to avoid spurious IO.
"""

import json
import os
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Type

from gcp_credkit.adapters.authorized_user import AuthorizedUserCredentials
from gcp_credkit.adapters.service_account_key import ServiceAccountKeyCredentials
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import UnsupportedOperationError
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult
from gcp_credkit.logging import get_logger
from gcp_credkit.ports.credentials_port import CredentialsPort, qualified_name

if TYPE_CHECKING:
    from gcp_credkit.sdk.factory import CredentialsFactory

logger = get_logger(__name__)


class ApplicationDefaultCredentials(CredentialsPort):
    """
    Default-source resolver.

    Missing, unreadable or unparsable files count as "no match". A file
    that matches a type but is incomplete raises ConfigurationError.
    """

    WELL_KNOWN_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"
    WELL_KNOWN_FILE_PATH = os.path.join(".config", "gcloud", "application_default_credentials.json")

    def __init__(self, factory: "CredentialsFactory", environ: Optional[Mapping[str, str]] = None):
        """
        Initialize application default credentials.

        Args:
            factory: Factory used to build the resolved source
            environ: Environment mapping (default: os.environ)
        """
        self._factory = factory
        self._environ = environ if environ is not None else os.environ
        self._lazy_credentials: Optional[CredentialsPort] = None

    @property
    def credentials_class(self) -> Optional[Type[CredentialsPort]]:
        """Concrete type of the resolved source, or None before first use."""
        return type(self._lazy_credentials) if self._lazy_credentials is not None else None

    def fetch_access_token(self, scopes: Optional[Sequence[str]] = None) -> AccessToken:
        return self._get_credentials().fetch_access_token(scopes)

    def fetch_identity_token(self, audience: str) -> IdentityToken:
        return self._get_credentials().fetch_identity_token(audience)

    def fetch_project_id(self) -> str:
        source = self._get_credentials()

        if not source.supports_capability(Capability.CAN_FETCH_PROJECT_ID):
            raise UnsupportedOperationError(
                f"Underlying credentials '{qualified_name(source)}' does not support fetch_project_id"
            )

        return source.fetch_project_id()

    def fetch_service_account_email(self) -> str:
        return self._get_credentials().fetch_service_account_email()

    def generate_signature(self, to_sign: bytes) -> SignatureResult:
        return self._get_credentials().generate_signature(to_sign)

    def supports_capability(self, capability: Capability) -> bool:
        return self._get_credentials().supports_capability(capability)

    def extend_cache_key(self) -> List[str]:
        source = self._get_credentials()
        return [qualified_name(source), *source.extend_cache_key()]

    def _get_credentials(self) -> CredentialsPort:
        if self._lazy_credentials is not None:
            return self._lazy_credentials

        for location, info in self._candidates():
            if ServiceAccountKeyCredentials.is_service_account_key(info):
                logger.debug("default_credentials_resolved", source="service_account", location=location)
                self._lazy_credentials = self._factory.make_service_account_key(info)
                return self._lazy_credentials

            if AuthorizedUserCredentials.is_authorized_user(info):
                logger.debug("default_credentials_resolved", source="authorized_user", location=location)
                self._lazy_credentials = self._factory.make_authorized_user_credentials(info)
                return self._lazy_credentials

        logger.debug("default_credentials_resolved", source="metadata_server")
        self._lazy_credentials = self._factory.make_metadata_server_credentials()
        return self._lazy_credentials

    def _candidates(self):
        """Yield (path, parsed JSON) for each credentials file, in probe order."""
        env_path = self._environ.get(self.WELL_KNOWN_ENV_VAR)
        if env_path:
            yield env_path, self._read_json_file(env_path)

        home = self._environ.get("HOME")
        if home:
            well_known = os.path.join(home, self.WELL_KNOWN_FILE_PATH)
            yield well_known, self._read_json_file(well_known)

    @staticmethod
    def _read_json_file(path: str) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug("credentials_file_unusable", path=path, error=str(e))
            return {}

        return data if isinstance(data, dict) else {}
