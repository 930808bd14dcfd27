"""
Configuration and settings for the Blogify backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional
from urllib.parse import quote_plus

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    log_level: str = Field(default="INFO")

    # Database (MongoDB Atlas expected)
    mongodb_uri: Optional[str] = Field(default=None)
    db_user: Optional[str] = Field(default=None)
    db_pass: Optional[str] = Field(default=None)
    db_cluster: str = Field(default="cluster0.mongodb.net")
    database_name: str = Field(default="blogifyDB")
    blogs_collection: str = Field(default="blogs")
    comments_collection: str = Field(default="comments")
    wishlists_collection: str = Field(default="wishlists")

    # Authentication
    auth_mode: Literal["bearer", "cookie"] = Field(default="bearer")
    fb_service_key: Optional[str] = Field(default=None)
    access_token_secret: Optional[str] = Field(default=None)
    access_token_ttl_minutes: int = Field(default=60)
    node_env: str = Field(default="development")

    # Development toggles
    blogify_use_in_memory_backends: bool = Field(default=False)

    @model_validator(mode="after")
    def _require_cookie_secret(self) -> "Settings":
        if self.auth_mode == "cookie" and not self.access_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET is required when AUTH_MODE=cookie")
        return self

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def has_database(self) -> bool:
        return bool(self.mongodb_uri or (self.db_user and self.db_pass))

    def mongodb_url(self) -> str:
        """Connection string, either given directly or assembled from parts."""
        if self.mongodb_uri:
            return self.mongodb_uri
        if not (self.db_user and self.db_pass):
            raise ValueError("DB_USER and DB_PASS (or MONGODB_URI) are required")
        return (
            f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
            f"@{self.db_cluster}/?retryWrites=true&w=majority"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
