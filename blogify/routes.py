"""
HTTP routes for the Blogify API.
"""

from __future__ import annotations

import logging
from typing import Optional

from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from blogify.auth import TOKEN_COOKIE, authorize_owner, get_current_identity
from blogify.config import Settings
from blogify.dependencies import get_app_settings, get_store, get_token_issuer
from blogify.identity import Identity, JwtTokenVerifier
from blogify.queries import BlogPage, select_blog_query
from blogify.schemas import (
    BlogPostPayload,
    BlogUpdatePayload,
    CommentPayload,
    CountResponse,
    DeleteBlogPayload,
    FailureResponse,
    RemoveWishlistPayload,
    SessionRequest,
    SessionResponse,
    WishlistPayload,
)
from blogify.store import DocumentStore

logger = logging.getLogger(__name__)

FEATURED_BANNER_LIMIT = 5
FEATURED_BLOG_LIMIT = 10

router = APIRouter()
session_router = APIRouter()


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=FailureResponse(message=message).model_dump()
    )


def _authorize_stored_author(
    identity: Identity, store: DocumentStore, blog_id: str
) -> None:
    """
    Fail unless the stored post belongs to the caller. Unknown or malformed ids
    are reported as 404 before anything is written.
    """
    try:
        blog = store.get_blog(blog_id)
    except InvalidId:
        blog = None
    if blog is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Blog not found"
        )
    authorize_owner(identity, (blog.get("author") or {}).get("email"))


@router.get("/", response_class=PlainTextResponse)
def root():
    return "Hello from the server!"


@router.get("/blogs")
def list_blogs(
    featured: Optional[str] = Query(None),
    breakingNews: Optional[str] = Query(None),
    categoryType: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(0, ge=0),
    limit: int = Query(0, ge=0),
    store: DocumentStore = Depends(get_store),
):
    query = select_blog_query(
        featured=featured,
        breaking_news=breakingNews,
        category_type=categoryType,
        search=search,
    )
    window = BlogPage(page=page, limit=limit)
    return store.find_blogs(query.to_filter(), skip=window.skip, limit=window.limit)


@router.get("/total-blogs", response_model=CountResponse)
def total_blogs(store: DocumentStore = Depends(get_store)):
    return CountResponse(count=store.count_blogs())


@router.get("/recent-posts")
def recent_posts(
    limit: int = Query(0, ge=0),
    store: DocumentStore = Depends(get_store),
):
    return store.find_blogs({}, sort=("publishedAt", DESCENDING), limit=limit)


@router.get("/featured-banners")
def featured_banners(store: DocumentStore = Depends(get_store)):
    return store.find_blogs({"featuredBanner": True}, limit=FEATURED_BANNER_LIMIT)


@router.get("/featured-blogs")
def featured_blogs(store: DocumentStore = Depends(get_store)):
    """
    Longest posts first, scored by the character length of the description.
    """
    blogs = store.find_blogs({})
    blogs.sort(key=lambda blog: len(blog.get("description") or ""), reverse=True)
    return blogs[:FEATURED_BLOG_LIMIT]


@router.get("/single-blog/{blog_id}")
def single_blog(blog_id: str, store: DocumentStore = Depends(get_store)):
    try:
        blog = store.get_blog(blog_id)
    except (InvalidId, PyMongoError):
        logger.exception("Failed to load blog %s", blog_id)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to load blog")
    if blog is None:
        return _failure(status.HTTP_404_NOT_FOUND, "Blog not found")
    return blog


@router.post("/add-blog/{email}")
def add_blog(
    email: str,
    payload: BlogPostPayload,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store),
):
    authorize_owner(identity, email)
    return store.insert_blog(payload.to_document()).as_dict()


@router.patch("/update-blog/{blog_id}")
def update_blog(
    blog_id: str,
    payload: BlogUpdatePayload,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store),
):
    authorize_owner(identity, payload.author.email)
    _authorize_stored_author(identity, store, blog_id)
    return store.update_blog(blog_id, payload.to_document()).as_dict()


@router.delete("/delete-blog/{email}")
def delete_blog(
    email: str,
    payload: DeleteBlogPayload,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store),
):
    authorize_owner(identity, email)
    _authorize_stored_author(identity, store, payload.id)
    return store.delete_blog(payload.id).as_dict()


@router.get("/my-blogs/{email}")
def my_blogs(
    email: str,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store),
):
    authorize_owner(identity, email)
    return store.find_blogs({"author.email": email})


@router.post("/add-comment")
def add_comment(payload: CommentPayload, store: DocumentStore = Depends(get_store)):
    return store.insert_comment(payload.to_document()).as_dict()


@router.get("/comments/{blog_id}")
def list_comments(blog_id: str, store: DocumentStore = Depends(get_store)):
    return store.find_comments({"blogId": blog_id})


@router.post("/add-wishlist")
def add_wishlist(payload: WishlistPayload, store: DocumentStore = Depends(get_store)):
    # Check-then-insert is not atomic; concurrent adds can both succeed.
    existing = store.find_wishlist_entry(
        {"postId": payload.postId, "userEmail": payload.userEmail}
    )
    if existing:
        raise HTTPException(status_code=400, detail="Already in wishlist")
    return store.insert_wishlist_entry(payload.to_document()).as_dict()


@router.delete("/remove-wishlist")
def remove_wishlist(
    payload: RemoveWishlistPayload, store: DocumentStore = Depends(get_store)
):
    return store.delete_wishlist_entry({"postId": payload.postId}).as_dict()


@router.get("/wishlists/{email}")
def list_wishlists(
    email: str,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store),
):
    authorize_owner(identity, email, status_code=status.HTTP_401_UNAUTHORIZED)
    return store.find_wishlist_entries({"userEmail": email})


@router.get("/wishlist/{post_id}")
def is_wishlisted(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    store: DocumentStore = Depends(get_store),
) -> bool:
    entry = store.find_wishlist_entry({"userEmail": identity.email, "postId": post_id})
    return entry is not None


def _cookie_options(settings: Settings) -> dict:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "strict",
    }


@session_router.post("/jwt", response_model=SessionResponse)
def issue_session(
    payload: SessionRequest,
    response: Response,
    issuer: JwtTokenVerifier = Depends(get_token_issuer),
    settings: Settings = Depends(get_app_settings),
):
    token = issuer.issue({"email": payload.email})
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=int(issuer.ttl.total_seconds()),
        **_cookie_options(settings),
    )
    return SessionResponse()


@session_router.post("/logout", response_model=SessionResponse)
def end_session(response: Response, settings: Settings = Depends(get_app_settings)):
    response.delete_cookie(TOKEN_COOKIE, **_cookie_options(settings))
    return SessionResponse()
