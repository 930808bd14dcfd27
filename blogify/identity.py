"""
Token verification backends for the authorization gate.

Two credential sources are supported: Firebase ID tokens sent as a bearer
header, and self-issued HS256 JWTs carried in the ``token`` cookie.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional, Protocol

import firebase_admin
from firebase_admin import auth, credentials
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
FIREBASE_APP_NAME = "blogify"


class InvalidCredentialsError(ValueError):
    """Raised when a presented token cannot be verified."""


@dataclass
class Identity:
    email: str
    claims: dict = field(default_factory=dict)


class TokenVerifier(Protocol):
    """Verifies a raw token and returns the caller's identity."""

    credential_source: Literal["bearer", "cookie"]

    def verify(self, token: str) -> Identity:
        ...


def _identity_from_claims(claims: dict) -> Identity:
    email = claims.get("email")
    if not email:
        raise InvalidCredentialsError("token carries no email claim")
    return Identity(email=email, claims=dict(claims))


def decode_service_key(encoded: str) -> dict:
    """Decode the base64 service account blob from the environment."""
    try:
        return json.loads(base64.b64decode(encoded).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError("FB_SERVICE_KEY is not base64-encoded JSON") from exc


class FirebaseTokenVerifier:
    """Verifies Firebase ID tokens with the Admin SDK."""

    credential_source: Literal["bearer", "cookie"] = "bearer"

    def __init__(self, app: firebase_admin.App):
        self.app = app

    @classmethod
    def from_service_key(cls, encoded_key: Optional[str]) -> "FirebaseTokenVerifier":
        try:
            return cls(firebase_admin.get_app(FIREBASE_APP_NAME))
        except ValueError:
            pass
        if encoded_key:
            cred = credentials.Certificate(decode_service_key(encoded_key))
        else:
            # Falls back to Application Default Credentials.
            cred = None
        app = firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)
        logger.info("Initialized Firebase app %s", app.name)
        return cls(app)

    def verify(self, token: str) -> Identity:
        try:
            claims = auth.verify_id_token(token, app=self.app)
        except (
            auth.InvalidIdTokenError,
            auth.CertificateFetchError,
            auth.UserDisabledError,
            ValueError,
        ) as exc:
            logger.info("Rejected Firebase ID token: %s", type(exc).__name__)
            raise InvalidCredentialsError(str(exc)) from exc
        return _identity_from_claims(claims)


class JwtTokenVerifier:
    """Issues and verifies self-signed session tokens."""

    credential_source: Literal["bearer", "cookie"] = "cookie"

    def __init__(self, secret: Optional[str], ttl_minutes: int = 60):
        if not secret:
            raise ValueError("ACCESS_TOKEN_SECRET is required for JWT sessions")
        self.secret = secret
        self.ttl = timedelta(minutes=ttl_minutes)

    def issue(self, claims: dict) -> str:
        to_encode = dict(claims)
        to_encode["exp"] = datetime.now(timezone.utc) + self.ttl
        return jwt.encode(to_encode, self.secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> Identity:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM])
        except JWTError as exc:
            logger.info("Rejected session token: %s", type(exc).__name__)
            raise InvalidCredentialsError(str(exc)) from exc
        return _identity_from_claims(claims)
