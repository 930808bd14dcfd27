"""
Authorization gate and ownership checks for protected routes.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blogify.dependencies import get_token_verifier
from blogify.identity import Identity, InvalidCredentialsError, TokenVerifier

TOKEN_COOKIE = "token"

# auto_error is off so a missing header yields 401 rather than 403.
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="unauthorized access",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Identity:
    """Resolve the caller's verified identity or fail with 401."""
    if verifier.credential_source == "cookie":
        token = request.cookies.get(TOKEN_COOKIE)
    else:
        token = bearer.credentials if bearer else None
    if not token:
        raise _unauthorized()
    try:
        return verifier.verify(token)
    except InvalidCredentialsError:
        raise _unauthorized()


def authorize_owner(
    identity: Identity,
    owner_email: Optional[str],
    *,
    status_code: int = status.HTTP_403_FORBIDDEN,
) -> None:
    """Fail closed unless the verified email owns the resource.

    ``owner_email`` is whatever the route identifies the owner by: a path
    segment, a field of the request body or a field of a stored document.
    """
    if not owner_email or identity.email != owner_email:
        detail = (
            "unauthorized access"
            if status_code == status.HTTP_401_UNAUTHORIZED
            else "forbidden access"
        )
        raise HTTPException(status_code=status_code, detail=detail)
