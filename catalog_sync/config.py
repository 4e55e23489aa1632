# ----------------------------------------------------------------
# Configuration for the Magento → Shopify catalog bridge
# ----------------------------------------------------------------
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Tuple

from dotenv import load_dotenv

# Load .env (allow container env to override file values)
load_dotenv(override=True)

DEFAULT_MEDIA_BASE_URL = "https://vapewholesaleusa.com/media/catalog/product"


def _rstrip_slash(s: str) -> str:
    return (s or "").rstrip("/")


def _get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on", "y"}


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw) if raw.strip() else default
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    try:
        return float(raw) if raw.strip() else default
    except ValueError:
        return default


def _get_list(name: str, default: str = "") -> List[str]:
    return [p.strip() for p in os.getenv(name, default).split(",") if p.strip()]


# ── Per-collaborator configuration objects ─────────────────────────────────
# Passed explicitly into every client / engine call.

@dataclass(frozen=True)
class MagentoConfig:
    api_url: str
    api_token: str
    media_base_url: str = DEFAULT_MEDIA_BASE_URL
    page_size: int = 100
    attribute_page_size: int = 500
    timeout: float = 30.0
    verify_tls: bool = True


@dataclass(frozen=True)
class ShopifyConfig:
    admin_api_url: str
    access_token: str
    timeout: float = 30.0
    verify_tls: bool = True


@dataclass(frozen=True)
class SyncOptions:
    media_base_url: str = DEFAULT_MEDIA_BASE_URL
    metafield_namespace: str = "magento_import"
    metafield_deny_list: Tuple[str, ...] = ("Short Description",)
    # "literal" compares selected option values against option names,
    # "value" compares them against option value names
    default_variant_match: str = "literal"
    media_batch_size: int = 50
    concurrency: int = 4


class Settings:
    def __init__(self):
        # ── Magento ──────────────────────────────────────────────────────────
        self.MAGENTO_API_URL: str = _rstrip_slash(os.getenv("MAGENTO_API_URL", ""))
        self.MAGENTO_API_TOKEN: str = os.getenv("MAGENTO_API_TOKEN", "")
        self.MAGENTO_MEDIA_BASE_URL: str = _rstrip_slash(
            os.getenv("MAGENTO_MEDIA_BASE_URL", "") or DEFAULT_MEDIA_BASE_URL
        )
        self.MAGENTO_PAGE_SIZE: int = _get_int("MAGENTO_PAGE_SIZE", 100)
        self.MAGENTO_ATTRIBUTE_PAGE_SIZE: int = _get_int("MAGENTO_ATTRIBUTE_PAGE_SIZE", 500)

        # ── Shopify ──────────────────────────────────────────────────────────
        self.SHOPIFY_ADMIN_API_URL: str = os.getenv("SHOPIFY_ADMIN_API_URL", "")
        self.SHOPIFY_ACCESS_TOKEN: str = os.getenv("SHOPIFY_ACCESS_TOKEN", "")

        # ── HTTP ─────────────────────────────────────────────────────────────
        self.HTTP_TIMEOUT: float = _get_float("HTTP_TIMEOUT", 30.0)
        self.HTTP_VERIFY_TLS: bool = _get_bool("HTTP_VERIFY_TLS", True)

        # ── Sync behaviour ───────────────────────────────────────────────────
        self.METAFIELD_NAMESPACE: str = os.getenv("METAFIELD_NAMESPACE", "magento_import")
        self.METAFIELD_DENY_LIST: List[str] = _get_list("METAFIELD_DENY_LIST", "Short Description")
        self.DEFAULT_VARIANT_MATCH: str = (os.getenv("DEFAULT_VARIANT_MATCH", "literal") or "literal").strip().lower()
        self.MEDIA_BATCH_SIZE: int = _get_int("MEDIA_BATCH_SIZE", 50)
        self.SYNC_CONCURRENCY: int = _get_int("SYNC_CONCURRENCY", 4)

        # ── Admin API ────────────────────────────────────────────────────────
        self.ADMIN_USER: str = os.getenv("ADMIN_USER", "admin")
        self.ADMIN_PASS: str = os.getenv("ADMIN_PASS", "changeme")

        # ── CORS ─────────────────────────────────────────────────────────────
        # Comma-separated list in .env, e.g. "https://example.com, https://foo.bar"
        self.CORS_ORIGINS: List[str] = _get_list("CORS_ORIGINS", "*")

    def magento(self) -> MagentoConfig:
        return MagentoConfig(
            api_url=self.MAGENTO_API_URL,
            api_token=self.MAGENTO_API_TOKEN,
            media_base_url=self.MAGENTO_MEDIA_BASE_URL,
            page_size=self.MAGENTO_PAGE_SIZE,
            attribute_page_size=self.MAGENTO_ATTRIBUTE_PAGE_SIZE,
            timeout=self.HTTP_TIMEOUT,
            verify_tls=self.HTTP_VERIFY_TLS,
        )

    def shopify(self) -> ShopifyConfig:
        return ShopifyConfig(
            admin_api_url=self.SHOPIFY_ADMIN_API_URL,
            access_token=self.SHOPIFY_ACCESS_TOKEN,
            timeout=self.HTTP_TIMEOUT,
            verify_tls=self.HTTP_VERIFY_TLS,
        )

    def sync_options(self) -> SyncOptions:
        return SyncOptions(
            media_base_url=self.MAGENTO_MEDIA_BASE_URL,
            metafield_namespace=self.METAFIELD_NAMESPACE,
            metafield_deny_list=tuple(self.METAFIELD_DENY_LIST),
            default_variant_match=self.DEFAULT_VARIANT_MATCH,
            media_batch_size=max(1, self.MEDIA_BATCH_SIZE),
            concurrency=max(1, self.SYNC_CONCURRENCY),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings for the web layer. Engine code takes config objects instead."""
    return Settings()
