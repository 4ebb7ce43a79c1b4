import logging
from collections.abc import Iterable

from fastapi import Depends, Header, HTTPException, Request, status

from school_api.auth.jwt_handler import Identity, InvalidTokenError, TokenService
from school_api.core.config import get_auth_settings
from school_api.models.user import ADMIN_ROLE, SUPERADMIN_ROLE

logger = logging.getLogger(__name__)

NO_TOKEN_MESSAGE = "Access denied. No token provided."
INVALID_TOKEN_MESSAGE = "Invalid token."
FORBIDDEN_MESSAGE = "Access denied. You do not have the required role."


def get_token_service() -> TokenService:
    return TokenService(get_auth_settings())


def identify(authorization: str | None, tokens: TokenService) -> Identity:
    """Resolve the caller behind an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=NO_TOKEN_MESSAGE)

    parts = authorization.split()
    if len(parts) < 2:
        logger.warning("Rejected authorization header without a token segment")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": INVALID_TOKEN_MESSAGE, "error": "Malformed authorization header"},
        )

    try:
        return tokens.verify(parts[1])
    except InvalidTokenError as exc:
        logger.warning("Rejected token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": INVALID_TOKEN_MESSAGE, "error": str(exc)},
        ) from exc


def authenticate(
    request: Request,
    authorization: str | None = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    identity = identify(authorization, tokens)
    request.state.user = identity
    return identity


class RoleChecker:
    """Dependency allowing a request through only for the configured roles."""

    def __init__(self, allowed_roles: Iterable[str]):
        self.allowed_roles = frozenset(allowed_roles)

    def __call__(self, identity: Identity = Depends(authenticate)) -> Identity:
        if identity is None or identity.role not in self.allowed_roles:
            logger.warning(
                "Denied role %r, allowed: %s",
                getattr(identity, "role", None),
                sorted(self.allowed_roles),
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_MESSAGE)
        return identity


require_admin = RoleChecker({ADMIN_ROLE, SUPERADMIN_ROLE})
require_superadmin = RoleChecker({SUPERADMIN_ROLE})
