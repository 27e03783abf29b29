"""
Token Domain Models - Immutable results of fetch/sign operations.

Domain rules:
- Value objects are built once per successful remote call, never mutated
- Access and identity tokens always carry a non-zero absolute expiry
- Signatures have no expiry and are never cached
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Union

import jwt

from gcp_credkit.domain import clock
from gcp_credkit.domain.errors import InvalidTokenError


def _to_datetime(value: Union[datetime, int, float]) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(value, tz=timezone.utc)


class ExpiringToken(ABC):
    """Mixin for value objects that expose their own expiry."""

    expires_at: datetime

    @property
    def expires_at_timestamp(self) -> int:
        return int(self.expires_at.timestamp())

    def is_expired(self) -> bool:
        """Check if the token has expired."""
        return clock.now() >= self.expires_at

    def __getitem__(self, key: str) -> Any:
        data = self.to_dict()
        if key not in data:
            raise KeyError(key)
        return data[key]

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        pass


@dataclass(frozen=True)
class AccessToken(ExpiringToken):
    """
    OAuth2 access token.

    WARNING: Contains a bearer credential. Never log to_dict().
    """
    token: str
    expires_at: datetime
    scope: str = ""
    token_type: str = "Bearer"

    def __post_init__(self):
        if not self.token:
            raise InvalidTokenError("Access token cannot be empty")
        if not self.expires_at:
            raise InvalidTokenError("Access token expiry cannot be empty")

        expires_at = _to_datetime(self.expires_at)
        if expires_at.timestamp() == 0:
            raise InvalidTokenError("Access token expiry cannot be empty")
        object.__setattr__(self, "expires_at", expires_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.token,
            "expires_at": self.expires_at_timestamp,
            "scope": self.scope,
            "token_type": self.token_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccessToken":
        """Deserialize from dict."""
        return cls(
            token=data["access_token"],
            expires_at=data["expires_at"],
            scope=data.get("scope", ""),
            token_type=data.get("token_type", "Bearer"),
        )


@dataclass(frozen=True)
class IdentityToken(ExpiringToken):
    """
    Google-signed identity token (compact JWT).

    expires_at is read from the unverified 'exp' claim. This is not
    validation: the signature and audience are never checked here.
    """
    token: str
    expires_at: datetime = field(init=False)

    def __post_init__(self):
        if not self.token:
            raise InvalidTokenError("Identity token cannot be empty")
        object.__setattr__(self, "expires_at", self._parse_expiry_unverified(self.token))

    @staticmethod
    def _parse_expiry_unverified(token: str) -> datetime:
        if token.count(".") != 2:
            raise InvalidTokenError("Identity token does not appear to be a JWT")

        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.DecodeError as e:
            raise InvalidTokenError(f"Identity token could not be decoded: {e}")

        exp = claims.get("exp")
        if not exp:
            raise InvalidTokenError("Identity token has empty or missing 'exp' claim")

        try:
            return _to_datetime(int(exp))
        except (TypeError, ValueError):
            raise InvalidTokenError(f"Identity token has non-numeric 'exp' claim: {exp!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id_token": self.token,
            "expires_at": self.expires_at_timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentityToken":
        return cls(token=data["id_token"])


@dataclass(frozen=True)
class SignatureResult:
    """Signature over caller-supplied bytes."""
    key_id: str
    signature: str  # base64

    def to_dict(self) -> Dict[str, Any]:
        return {"key_id": self.key_id, "signature": self.signature}
