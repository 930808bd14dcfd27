"""
Document store abstraction for MongoDB and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Tuple

from bson import ObjectId
from pymongo import DESCENDING, MongoClient
from pymongo.collection import Collection


SortSpec = Tuple[str, int]


class DocumentStore(Protocol):
    """Interface for the three collections the API reads and writes."""

    def ping(self) -> None:
        ...

    def find_blogs(
        self,
        query: dict,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict]:
        ...

    def count_blogs(self) -> int:
        ...

    def get_blog(self, blog_id: str) -> Optional[dict]:
        ...

    def insert_blog(self, doc: dict) -> "InsertAck":
        ...

    def update_blog(self, blog_id: str, fields: dict) -> "UpdateAck":
        ...

    def delete_blog(self, blog_id: str) -> "DeleteAck":
        ...

    def insert_comment(self, doc: dict) -> "InsertAck":
        ...

    def find_comments(self, query: dict) -> list[dict]:
        ...

    def find_wishlist_entry(self, query: dict) -> Optional[dict]:
        ...

    def insert_wishlist_entry(self, doc: dict) -> "InsertAck":
        ...

    def delete_wishlist_entry(self, query: dict) -> "DeleteAck":
        ...

    def find_wishlist_entries(self, query: dict) -> list[dict]:
        ...


@dataclass
class InsertAck:
    inserted_id: str
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "insertedId": self.inserted_id}


@dataclass
class UpdateAck:
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {
            "acknowledged": self.acknowledged,
            "matchedCount": self.matched_count,
            "modifiedCount": self.modified_count,
            "upsertedCount": 1 if self.upserted_id else 0,
            "upsertedId": self.upserted_id,
        }


@dataclass
class DeleteAck:
    deleted_count: int
    acknowledged: bool = True

    def as_dict(self) -> dict:
        return {"acknowledged": self.acknowledged, "deletedCount": self.deleted_count}


def serialize_document(doc: dict) -> dict:
    """Return a JSON-friendly copy with the ObjectId rendered as hex."""
    out = dict(doc)
    if isinstance(out.get("_id"), ObjectId):
        out["_id"] = str(out["_id"])
    return out


def _settable_fields(fields: dict) -> dict:
    return {key: value for key, value in fields.items() if key != "_id"}


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.blogs: List[dict] = []
        self.comments: List[dict] = []
        self.wishlists: List[dict] = []

    def ping(self) -> None:
        return None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.blogs.clear()
        self.comments.clear()
        self.wishlists.clear()

    def find_blogs(
        self,
        query: dict,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict]:
        docs = [doc for doc in self.blogs if matches(doc, query)]
        if sort:
            field, direction = sort
            present = [doc for doc in docs if _lookup(doc, field) is not None]
            missing = [doc for doc in docs if _lookup(doc, field) is None]
            present.sort(
                key=lambda doc: _lookup(doc, field), reverse=direction == DESCENDING
            )
            docs = present + missing if direction == DESCENDING else missing + present
        docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        return [serialize_document(copy.deepcopy(doc)) for doc in docs]

    def count_blogs(self) -> int:
        return len(self.blogs)

    def get_blog(self, blog_id: str) -> Optional[dict]:
        oid = ObjectId(blog_id)
        for doc in self.blogs:
            if doc["_id"] == oid:
                return serialize_document(copy.deepcopy(doc))
        return None

    def insert_blog(self, doc: dict) -> InsertAck:
        return self._insert(self.blogs, doc)

    def update_blog(self, blog_id: str, fields: dict) -> UpdateAck:
        oid = ObjectId(blog_id)
        for doc in self.blogs:
            if doc["_id"] != oid:
                continue
            changes = _settable_fields(fields)
            modified = any(
                key not in doc or doc[key] != value for key, value in changes.items()
            )
            doc.update(copy.deepcopy(changes))
            return UpdateAck(matched_count=1, modified_count=1 if modified else 0)
        return UpdateAck(matched_count=0, modified_count=0)

    def delete_blog(self, blog_id: str) -> DeleteAck:
        return self._delete_one(self.blogs, {"_id": ObjectId(blog_id)})

    def insert_comment(self, doc: dict) -> InsertAck:
        return self._insert(self.comments, doc)

    def find_comments(self, query: dict) -> list[dict]:
        return [
            serialize_document(copy.deepcopy(doc))
            for doc in self.comments
            if matches(doc, query)
        ]

    def find_wishlist_entry(self, query: dict) -> Optional[dict]:
        for doc in self.wishlists:
            if matches(doc, query):
                return serialize_document(copy.deepcopy(doc))
        return None

    def insert_wishlist_entry(self, doc: dict) -> InsertAck:
        return self._insert(self.wishlists, doc)

    def delete_wishlist_entry(self, query: dict) -> DeleteAck:
        return self._delete_one(self.wishlists, query)

    def find_wishlist_entries(self, query: dict) -> list[dict]:
        return [
            serialize_document(copy.deepcopy(doc))
            for doc in self.wishlists
            if matches(doc, query)
        ]

    def _insert(self, collection: List[dict], doc: dict) -> InsertAck:
        stored = copy.deepcopy(_settable_fields(doc))
        stored["_id"] = ObjectId()
        collection.append(stored)
        return InsertAck(inserted_id=str(stored["_id"]))

    def _delete_one(self, collection: List[dict], query: dict) -> DeleteAck:
        for index, doc in enumerate(collection):
            if matches(doc, query):
                del collection[index]
                return DeleteAck(deleted_count=1)
        return DeleteAck(deleted_count=0)


_MISSING = object()


def _lookup(doc: dict, path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part, _MISSING)
        if value is _MISSING:
            return None
    return value


def matches(doc: dict, query: dict) -> bool:
    """Evaluate the subset of MongoDB filter syntax the API produces."""
    for path, condition in query.items():
        value = _lookup(doc, path)
        if isinstance(condition, dict) and "$regex" in condition:
            if not isinstance(value, str):
                return False
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not re.search(condition["$regex"], value, flags):
                return False
        elif value != condition:
            return False
    return True


class MongoDocumentStore:
    """
    pymongo-backed implementation. One client is held for the life of the process.
    """

    def __init__(
        self,
        client: MongoClient,
        database_name: str,
        *,
        blogs_collection: str = "blogs",
        comments_collection: str = "comments",
        wishlists_collection: str = "wishlists",
    ):
        self.client = client
        self.database = client[database_name]
        self.blogs: Collection = self.database[blogs_collection]
        self.comments: Collection = self.database[comments_collection]
        self.wishlists: Collection = self.database[wishlists_collection]

    @classmethod
    def from_url(cls, url: str, database_name: str, **collections: str):
        if not url:
            raise ValueError("A MongoDB connection string is required")
        return cls(MongoClient(url), database_name, **collections)

    def ping(self) -> None:
        self.client.admin.command("ping")

    def find_blogs(
        self,
        query: dict,
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict]:
        cursor = self.blogs.find(query)
        if sort:
            cursor = cursor.sort(*sort)
        cursor = cursor.skip(skip).limit(limit)
        return [serialize_document(doc) for doc in cursor]

    def count_blogs(self) -> int:
        return self.blogs.estimated_document_count()

    def get_blog(self, blog_id: str) -> Optional[dict]:
        doc = self.blogs.find_one({"_id": ObjectId(blog_id)})
        return serialize_document(doc) if doc else None

    def insert_blog(self, doc: dict) -> InsertAck:
        return self._insert(self.blogs, doc)

    def update_blog(self, blog_id: str, fields: dict) -> UpdateAck:
        result = self.blogs.update_one(
            {"_id": ObjectId(blog_id)}, {"$set": _settable_fields(fields)}
        )
        return UpdateAck(
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=str(result.upserted_id) if result.upserted_id else None,
            acknowledged=result.acknowledged,
        )

    def delete_blog(self, blog_id: str) -> DeleteAck:
        return self._delete_one(self.blogs, {"_id": ObjectId(blog_id)})

    def insert_comment(self, doc: dict) -> InsertAck:
        return self._insert(self.comments, doc)

    def find_comments(self, query: dict) -> list[dict]:
        return [serialize_document(doc) for doc in self.comments.find(query)]

    def find_wishlist_entry(self, query: dict) -> Optional[dict]:
        doc = self.wishlists.find_one(query)
        return serialize_document(doc) if doc else None

    def insert_wishlist_entry(self, doc: dict) -> InsertAck:
        return self._insert(self.wishlists, doc)

    def delete_wishlist_entry(self, query: dict) -> DeleteAck:
        return self._delete_one(self.wishlists, query)

    def find_wishlist_entries(self, query: dict) -> list[dict]:
        return [serialize_document(doc) for doc in self.wishlists.find(query)]

    def _insert(self, collection: Collection, doc: dict) -> InsertAck:
        # insert_one mutates its argument by adding _id.
        result = collection.insert_one(dict(_settable_fields(doc)))
        return InsertAck(
            inserted_id=str(result.inserted_id), acknowledged=result.acknowledged
        )

    def _delete_one(self, collection: Collection, query: dict) -> DeleteAck:
        result = collection.delete_one(query)
        return DeleteAck(
            deleted_count=result.deleted_count, acknowledged=result.acknowledged
        )
