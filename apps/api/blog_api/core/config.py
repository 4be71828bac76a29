"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "firebase"] = "firebase"
    firebase_project_id: str | None = None
    firebase_audience: str | None = None
    revoked_user_ids: frozenset[str] = frozenset()
    api_vendor: str = Field(default="blog", min_length=1)
    api_version: str = Field(default="v1", pattern=r"^v\d+$")

    model_config = SettingsConfigDict(env_prefix="BLOG_", extra="ignore")

    @property
    def api_media_type(self) -> str:
        return f"application/vnd.{self.api_vendor}.{self.api_version}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
