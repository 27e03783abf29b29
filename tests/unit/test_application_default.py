"""
Unit tests for ApplicationDefaultCredentials.
"""

import json
import os
from unittest.mock import call, patch

import httpx
import pytest

from gcp_credkit.adapters.application_default import ApplicationDefaultCredentials
from gcp_credkit.adapters.authorized_user import AuthorizedUserCredentials
from gcp_credkit.adapters.metadata_server import MetadataServerCredentials
from gcp_credkit.adapters.service_account_key import ServiceAccountKeyCredentials
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import ConfigurationError, UnsupportedOperationError
from gcp_credkit.sdk.factory import CredentialsFactory


def _write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return str(path)


@pytest.fixture
def home(tmp_path):
    return tmp_path / "home"


@pytest.fixture
def well_known(home):
    return home / ".config" / "gcloud" / "application_default_credentials.json"


def _resolver(environ):
    return ApplicationDefaultCredentials(CredentialsFactory(httpx.Client()), environ=environ)


class TestResolution:
    """Test source selection order."""

    def test_env_var_service_account(self, tmp_path, home, service_account_info):
        """Test GOOGLE_APPLICATION_CREDENTIALS pointing at a service account key."""
        path = _write_json(tmp_path / "key.json", service_account_info)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path, "HOME": str(home)})

        assert credentials.credentials_class is None
        assert credentials.fetch_project_id() == "a-project-id"
        assert credentials.credentials_class is ServiceAccountKeyCredentials

    def test_env_var_match_skips_well_known_file(self, tmp_path, home, well_known, service_account_info,
                                                 authorized_user_info):
        """Test the well-known file is not read once the env var file matches."""
        path = _write_json(tmp_path / "key.json", service_account_info)
        _write_json(well_known, authorized_user_info)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path, "HOME": str(home)})

        with patch.object(
            ApplicationDefaultCredentials,
            "_read_json_file",
            wraps=ApplicationDefaultCredentials._read_json_file,
        ) as read:
            credentials.fetch_service_account_email()

        assert read.call_args_list == [call(path)]
        assert credentials.credentials_class is ServiceAccountKeyCredentials

    def test_well_known_authorized_user(self, home, well_known, authorized_user_info):
        """Test well-known authorized user."""
        _write_json(well_known, authorized_user_info)
        credentials = _resolver({"HOME": str(home)})

        assert not credentials.supports_capability(Capability.CAN_FETCH_PROJECT_ID)
        assert credentials.credentials_class is AuthorizedUserCredentials

    def test_missing_env_file_falls_through(self, tmp_path, home, well_known, authorized_user_info):
        """Test missing env file falls through."""
        _write_json(well_known, authorized_user_info)
        credentials = _resolver({
            "GOOGLE_APPLICATION_CREDENTIALS": str(tmp_path / "does-not-exist.json"),
            "HOME": str(home),
        })

        credentials.supports_capability(Capability.CAN_GENERATE_SIGNATURE)

        assert credentials.credentials_class is AuthorizedUserCredentials

    def test_unrecognized_type_falls_through(self, tmp_path, home, well_known, authorized_user_info):
        """Test unrecognized type falls through."""
        path = _write_json(tmp_path / "external.json", {"type": "external_account"})
        _write_json(well_known, authorized_user_info)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path, "HOME": str(home)})

        credentials.supports_capability(Capability.CAN_GENERATE_SIGNATURE)

        assert credentials.credentials_class is AuthorizedUserCredentials

    @pytest.mark.parametrize("contents", ["{not json", "[1, 2, 3]", ""])
    def test_unparsable_files_fall_through_to_metadata(self, tmp_path, home, well_known, contents):
        """Test unparsable files fall through to metadata."""
        path = _write_json(tmp_path / "key.json", contents)
        _write_json(well_known, contents)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path, "HOME": str(home)})

        credentials.supports_capability(Capability.CAN_GENERATE_SIGNATURE)

        assert credentials.credentials_class is MetadataServerCredentials

    def test_nothing_configured_uses_metadata(self):
        """Test nothing configured uses metadata."""
        credentials = _resolver({})

        assert not credentials.supports_capability(Capability.CAN_GENERATE_SIGNATURE)
        assert credentials.credentials_class is MetadataServerCredentials

    def test_incomplete_match_raises(self, tmp_path, service_account_info):
        """Test incomplete match raises."""
        info = dict(service_account_info)
        del info["private_key"]
        path = _write_json(tmp_path / "key.json", info)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path})

        with pytest.raises(ConfigurationError):
            credentials.fetch_service_account_email()


class TestDelegation:
    """Test operations on the resolved source."""

    def test_resolved_once(self, tmp_path, service_account_info):
        """Test the source is resolved only once."""
        path = _write_json(tmp_path / "key.json", service_account_info)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path})

        with patch.object(
            ApplicationDefaultCredentials,
            "_read_json_file",
            wraps=ApplicationDefaultCredentials._read_json_file,
        ) as read:
            credentials.fetch_project_id()
            credentials.fetch_service_account_email()
            credentials.generate_signature(b"bytes to sign")

        assert read.call_count == 1

    def test_access_token_via_metadata(self, fake_http, json_response, frozen_clock, monkeypatch):
        """Test access token via metadata."""
        monkeypatch.delenv("GCE_METADATA_HOST", raising=False)
        transport, client = fake_http(json_response({"access_token": "ya29.metadata-token", "expires_in": 3599}))
        credentials = ApplicationDefaultCredentials(CredentialsFactory(client), environ={})

        token = credentials.fetch_access_token(["scope-a"])

        assert token.token == "ya29.metadata-token"
        assert transport.requests[0].url.host == "169.254.169.254"

    def test_project_id_unsupported(self, home, well_known, authorized_user_info):
        """Test project ID unsupported."""
        _write_json(well_known, authorized_user_info)
        credentials = _resolver({"HOME": str(home)})

        with pytest.raises(UnsupportedOperationError):
            credentials.fetch_project_id()

    def test_extend_cache_key_names_resolved_source(self, tmp_path, service_account_info):
        """Test extend cache key names resolved source."""
        path = _write_json(tmp_path / "key.json", service_account_info)
        credentials = _resolver({"GOOGLE_APPLICATION_CREDENTIALS": path})

        key = credentials.extend_cache_key()

        assert key == [
            "gcp_credkit.adapters.service_account_key.ServiceAccountKeyCredentials",
            service_account_info["client_email"],
            "a-private-key-id",
        ]

    def test_well_known_path_layout(self):
        """Test well-known path layout."""
        assert ApplicationDefaultCredentials.WELL_KNOWN_FILE_PATH == os.path.join(
            ".config", "gcloud", "application_default_credentials.json"
        )
