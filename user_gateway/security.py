from __future__ import annotations

import jwt
from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from user_gateway.config import SecurityConfig

OPAQUE_PRINCIPAL = "anonymous-bearer"

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def authenticate(token: str, config: SecurityConfig) -> str:
    """Validate a bearer token and return the principal it names.

    Tokens are opaque unless a JWT secret is configured.
    """
    if not config.jwt_secret:
        return OPAQUE_PRINCIPAL

    try:
        claims = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            audience=config.jwt_audience,
            issuer=config.jwt_issuer,
            options={"verify_aud": config.jwt_audience is not None},
        )
    except jwt.InvalidTokenError as exc:
        raise _unauthorized(f"Invalid token: {exc}") from exc
    return str(claims.get("sub") or OPAQUE_PRINCIPAL)


async def require_authentication(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        logger.info("Rejected {} {}: no bearer token", request.method, request.url.path)
        raise _unauthorized("Not authenticated")

    try:
        principal = authenticate(
            credentials.credentials, request.app.state.config.security
        )
    except HTTPException:
        logger.info("Rejected {} {}: invalid token", request.method, request.url.path)
        raise
    logger.debug("Authenticated {} for {}", principal, request.url.path)
    return principal
