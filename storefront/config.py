"""
Configuration for the storefront catalog service.

Values are read from ``STOREFRONT_*`` environment variables (or a
``.env`` file). The API base URL is chosen from a small table of known
backends keyed by ``STOREFRONT_API_ID`` unless ``STOREFRONT_API_URL``
overrides it. All catalog requests are scoped to a single store through
the public endpoint ``{api}/public/s/{store_id}/``.
"""

from functools import lru_cache
from typing import Dict, Optional
from urllib.parse import urljoin

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_URL = "http://localhost:500/"

# Known backends for generated storefronts
API_URL_MAPPING: Dict[int, str] = {
    1: "http://localhost:500/",
    2: "http://localhost:500/",
    3: "https://oraginic.vercel.app/",
    4: "https://onno-server.vercel.app/",
    5: "https://alfredo-server.vercel.app/",
}


class Settings(BaseSettings):
    """Settings for the catalog fetch client and view engine."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_id: int = Field(default=1, description="Key into the table of known backends.")
    api_url: str = Field(default="", description="Explicit API root; wins over api_id when set.")
    store_id: Optional[str] = Field(default=None, description="Store whose public catalog is shown.")

    # View engine defaults
    page_size: int = Field(default=8, gt=0, description="Products per 'All Products' page.")
    home_section_limit: int = Field(default=8, gt=0, description="Products per home section.")

    # Seconds before an API request is abandoned
    http_timeout: int = Field(default=10, gt=0)

    @field_validator("store_id", mode="before")
    @classmethod
    def _blank_store(cls, value):
        return value or None

    @property
    def api_base_url(self) -> str:
        if self.api_url:
            return self.api_url
        return API_URL_MAPPING.get(self.api_id, DEFAULT_API_URL)

    @property
    def public_base_url(self) -> Optional[str]:
        """Store-scoped public API root, or ``None`` when no store is set."""
        if not self.store_id:
            return None
        base = self.api_base_url if self.api_base_url.endswith("/") else self.api_base_url + "/"
        return urljoin(base, f"/public/s/{self.store_id}/")

    def build_public_url(self, path: str) -> Optional[str]:
        public = self.public_base_url
        if not public:
            return None
        return urljoin(public, path.lstrip("/"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()
