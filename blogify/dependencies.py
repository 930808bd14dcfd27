"""
Dependency wiring for the FastAPI app.

The store and the token verifier live on ``app.state``: each is built from the
settings the app was created with on first use and kept until the process
exits. Nothing closes them on shutdown.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from fastapi import FastAPI, Request

from blogify.config import Settings, get_settings
from blogify.identity import FirebaseTokenVerifier, JwtTokenVerifier, TokenVerifier
from blogify.store import DocumentStore, InMemoryDocumentStore, MongoDocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def app_settings(app: FastAPI) -> Settings:
    """Settings the app was built with."""
    return getattr(app.state, "settings", None) or get_settings()


def get_app_settings(request: Request) -> Settings:
    return app_settings(request.app)


def _app_singleton(app: FastAPI, name: str, factory: Callable[[Settings], T]) -> T:
    value = getattr(app.state, name, None)
    if value is None:
        value = factory(app_settings(app))
        setattr(app.state, name, value)
    return value


def build_store(settings: Settings) -> DocumentStore:
    if settings.blogify_use_in_memory_backends or not settings.has_database:
        logger.warning("No database configured, using the in-memory store")
        return InMemoryDocumentStore()
    return MongoDocumentStore.from_url(
        settings.mongodb_url(),
        settings.database_name,
        blogs_collection=settings.blogs_collection,
        comments_collection=settings.comments_collection,
        wishlists_collection=settings.wishlists_collection,
    )


def build_token_issuer(settings: Settings) -> JwtTokenVerifier:
    return JwtTokenVerifier(
        settings.access_token_secret, settings.access_token_ttl_minutes
    )


def build_firebase_verifier(settings: Settings) -> FirebaseTokenVerifier:
    return FirebaseTokenVerifier.from_service_key(settings.fb_service_key)


def store_for(app: FastAPI) -> DocumentStore:
    """
    Return the app's document store so one connection serves every request.
    """
    return _app_singleton(app, "store", build_store)


def get_store(request: Request) -> DocumentStore:
    return store_for(request.app)


def get_token_issuer(request: Request) -> JwtTokenVerifier:
    return _app_singleton(request.app, "token_issuer", build_token_issuer)


def get_token_verifier(request: Request) -> TokenVerifier:
    """
    Return the verifier for the app's credential source.

    In cookie mode the verifier is the issuer itself, so cookies the app hands
    out are accepted by its own gate.
    """
    if get_app_settings(request).auth_mode == "cookie":
        return get_token_issuer(request)
    return _app_singleton(request.app, "token_verifier", build_firebase_verifier)
