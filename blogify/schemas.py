"""
Pydantic schemas for the Blogify API.

Documents are stored as the client sends them, so payload models only pin the
fields the routes rely on and keep everything else.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Document(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_document(self) -> dict:
        return self.model_dump(exclude_unset=True)


class AuthorInfo(Document):
    email: str
    name: Optional[str] = None
    photo: Optional[str] = None


class BlogPostPayload(Document):
    author: Optional[AuthorInfo] = None


class BlogUpdatePayload(BlogPostPayload):
    author: AuthorInfo


class DeleteBlogPayload(BaseModel):
    id: str = Field(..., min_length=1)


class CommentPayload(Document):
    blogId: str
    comment: Optional[str] = None


class WishlistPayload(Document):
    postId: str
    userEmail: str


class RemoveWishlistPayload(BaseModel):
    postId: str


class SessionRequest(BaseModel):
    email: str = Field(..., min_length=3)


class SessionResponse(BaseModel):
    success: Literal[True] = True


class CountResponse(BaseModel):
    count: int


class FailureResponse(BaseModel):
    success: Literal[False] = False
    message: str
