from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from school_api.core.config import AuthSettings


class InvalidTokenError(Exception):
    """Raised when a token cannot be trusted."""


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies signed access tokens carrying a user id and role."""

    def __init__(self, settings: AuthSettings, clock: Callable[[], datetime] | None = None):
        if not settings.secret_key:
            raise ValueError("A signing secret is required.")
        self._settings = settings
        self._clock = clock or _utcnow

    def issue(self, user) -> str:
        now = self._clock()
        payload = {
            "sub": str(user.id),
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(minutes=self._settings.expires_minutes),
        }
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        subject = payload.get("sub")
        role = payload.get("role")
        if not role:
            raise InvalidTokenError("Token is missing the role claim")
        try:
            user_id = int(subject)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("Token subject is not a user id") from exc

        return Identity(user_id=user_id, role=role)
