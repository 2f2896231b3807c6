# storefront/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


class Config:
    # REST API root; every endpoint path is relative to it
    API_BASE_URL = os.environ.get(
        "STOREFRONT_API_URL",
        "http://localhost:5000/api",
    )
    REQUEST_TIMEOUT = float(os.environ.get("STOREFRONT_REQUEST_TIMEOUT", "30"))

    # Local persistent store (session + cart), SQLite file by default
    STORAGE_URL = os.environ.get(
        "STOREFRONT_STORAGE_URL",
        "sqlite:///storefront.sqlite3",
    )

    # Where report/comment exports are written
    DOWNLOAD_DIR = os.environ.get("STOREFRONT_DOWNLOAD_DIR", os.getcwd())

    # Re-apply status/search/sort/pagination over the fetched comments page
    COMMENTS_CLIENT_FILTERING = _env_bool("STOREFRONT_COMMENTS_CLIENT_FILTERING", "true")

    LOG_LEVEL = os.environ.get("STOREFRONT_LOG_LEVEL", "INFO")

    TOAST_HISTORY = 50

    @classmethod
    def from_mapping(cls, overrides: dict | None = None) -> type["Config"]:
        """Return a Config subclass with the given attributes overridden."""
        return type("Config", (cls,), dict(overrides or {}))
