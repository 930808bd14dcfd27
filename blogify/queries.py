"""
Filter descriptions for listing blog posts.

Exactly one variant applies to a listing request. They are checked in a fixed
order: featured, breaking news, category, title search, then everything.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

ALL_CATEGORIES = "All"


@dataclass(frozen=True)
class FeaturedQuery:
    def to_filter(self) -> dict:
        return {"featured": True}


@dataclass(frozen=True)
class BreakingNewsQuery:
    def to_filter(self) -> dict:
        return {"breakingNews": True}


@dataclass(frozen=True)
class CategoryQuery:
    category: str

    def to_filter(self) -> dict:
        return {"category": self.category}


@dataclass(frozen=True)
class SearchQuery:
    text: str

    def to_filter(self) -> dict:
        return {"title": {"$regex": re.escape(self.text), "$options": "i"}}


@dataclass(frozen=True)
class AllPostsQuery:
    def to_filter(self) -> dict:
        return {}


BlogQuery = Union[
    FeaturedQuery, BreakingNewsQuery, CategoryQuery, SearchQuery, AllPostsQuery
]


@dataclass(frozen=True)
class BlogPage:
    """Pagination window; a limit of 0 means no limit."""

    page: int = 0
    limit: int = 0

    @property
    def skip(self) -> int:
        return self.page * self.limit


def select_blog_query(
    *,
    featured: Optional[str] = None,
    breaking_news: Optional[str] = None,
    category_type: Optional[str] = None,
    search: Optional[str] = None,
) -> BlogQuery:
    """Pick the single filter variant for a listing request.

    Flags count as present when they carry any non-empty value, so
    ``featured=false`` still selects featured posts.
    """
    if featured:
        return FeaturedQuery()
    if breaking_news:
        return BreakingNewsQuery()
    if category_type and category_type != ALL_CATEGORIES:
        return CategoryQuery(category_type)
    if search:
        return SearchQuery(search)
    return AllPostsQuery()
