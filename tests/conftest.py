"""
Shared fixtures: keys, credential files, a frozen clock and a fake HTTP transport.
"""

import json
from datetime import datetime, timezone

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from gcp_credkit.domain import clock
from gcp_credkit.domain.capability import Capability
from gcp_credkit.domain.errors import UnsupportedOperationError
from gcp_credkit.domain.tokens import AccessToken, IdentityToken, SignatureResult
from gcp_credkit.ports.credentials_port import CredentialsPort

NOW = datetime(2020, 7, 31, tzinfo=timezone.utc)


class FakeTransport:
    """
    Replays queued responses and records every request.

    Each queued item is an httpx.Response or a callable(request) -> Response.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self.responses.pop(0)
        return response(request) if callable(response) else response

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_http():
    """Build a (transport, client) pair from queued responses."""
    def _build(*responses):
        transport = FakeTransport(*responses)
        return transport, transport.client()
    return _build


@pytest.fixture
def frozen_clock():
    """Pin clock.now() to NOW for the duration of a test."""
    clock.set_for_test(NOW)
    yield NOW
    clock.reset_for_test()


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key):
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def service_account_info(private_key_pem):
    return {
        "type": "service_account",
        "project_id": "a-project-id",
        "private_key_id": "a-private-key-id",
        "private_key": private_key_pem,
        "client_email": "fake@a-project-id.iam.gserviceaccount.com",
        "client_id": "1234567890",
    }


@pytest.fixture
def authorized_user_info():
    return {
        "type": "authorized_user",
        "client_id": "a-client-id.apps.googleusercontent.com",
        "client_secret": "a-client-secret",
        "refresh_token": "a-refresh-token",
    }


@pytest.fixture
def make_id_token():
    """Build an unverified-but-well-formed JWT with the given 'exp'."""
    def _make(exp, audience="https://example.com", **claims):
        payload = {"aud": audience, "sub": "1234567890", "exp": exp}
        payload.update(claims)
        return jwt.encode(payload, "not-a-google-key-only-for-unit-tests-0123456789", algorithm="HS256")
    return _make


@pytest.fixture
def json_response():
    def _make(data, status_code=200):
        return httpx.Response(status_code, content=json.dumps(data).encode("utf-8"),
                              headers={"Content-Type": "application/json"})
    return _make


class StubCredentials(CredentialsPort):
    """
    In-memory credentials source that counts calls.

    Capabilities listed in `capabilities` are supported; every other
    optional operation raises UnsupportedOperationError.
    """

    def __init__(self, capabilities=(), email="stub@a-project-id.iam.gserviceaccount.com",
                 project_id="a-project-id", id_token_factory=None, cache_key=None):
        self.capabilities = set(capabilities)
        self.email = email
        self.project_id = project_id
        self.id_token_factory = id_token_factory
        self.cache_key = list(cache_key or [])
        self.calls = []

    def fetch_access_token(self, scopes=None):
        self.calls.append(("fetch_access_token", list(scopes or [])))
        return AccessToken(
            token=f"token-{len(self.calls)}",
            expires_at=clock.calculate_expires_at(3600),
            scope=" ".join(scopes or []),
        )

    def fetch_identity_token(self, audience):
        self.calls.append(("fetch_identity_token", audience))
        if self.id_token_factory is None:
            raise UnsupportedOperationError("no identity tokens configured")
        return IdentityToken(self.id_token_factory(audience))

    def fetch_project_id(self):
        self.calls.append(("fetch_project_id",))
        if Capability.CAN_FETCH_PROJECT_ID not in self.capabilities:
            raise UnsupportedOperationError("fetch_project_id")
        return self.project_id

    def fetch_service_account_email(self):
        self.calls.append(("fetch_service_account_email",))
        if Capability.CAN_FETCH_SERVICE_ACCOUNT_EMAIL not in self.capabilities:
            raise UnsupportedOperationError("fetch_service_account_email")
        return self.email

    def generate_signature(self, to_sign):
        self.calls.append(("generate_signature", to_sign))
        if Capability.CAN_GENERATE_SIGNATURE not in self.capabilities:
            raise UnsupportedOperationError("generate_signature")
        return SignatureResult(key_id="stub-key", signature=f"signed-{len(self.calls)}")

    def supports_capability(self, capability):
        return capability in self.capabilities

    def extend_cache_key(self):
        return list(self.cache_key)

    def count(self, operation):
        return sum(1 for call in self.calls if call[0] == operation)


@pytest.fixture
def stub_credentials():
    """Build a StubCredentials source."""
    return StubCredentials
