#==========================================================================================
# catalog_sync/shopify/client.py
# Shopify Admin GraphQL interface: one typed request/response call plus the
# existing-product title lookup.
#==========================================================================================
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from catalog_sync.config import ShopifyConfig
from catalog_sync.errors import TransportError
from catalog_sync.shopify.models import DestinationProductRef
from catalog_sync.shopify.queries import FIND_PRODUCTS_QUERY

logger = logging.getLogger(__name__)


def title_search_query(title: str) -> str:
    escaped = (title or "").replace("\\", "\\\\").replace('"', '\\"')
    return f'title:"{escaped}"'


class ShopifyClient:
    def __init__(self, config: ShopifyConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.config.access_token,
        }

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        POST one GraphQL document and return its `data`.
        Non-2xx responses and top-level `errors` raise TransportError; nested
        `userErrors` are left for the caller to inspect.
        """
        payload = {"query": query, "variables": variables or {}}
        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            verify=self.config.verify_tls,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.post(self.config.admin_api_url, headers=self._headers(), json=payload)
            except httpx.HTTPError as e:
                raise TransportError(f"Shopify request failed: {e}") from e

        if resp.status_code < 200 or resp.status_code >= 300:
            raise TransportError(
                f"GraphQL HTTP {resp.status_code}: {resp.text[:300]}",
                status_code=resp.status_code,
            )
        try:
            result = resp.json()
        except ValueError as e:
            raise TransportError("Shopify returned a non-JSON body", status_code=resp.status_code) from e

        errors = result.get("errors")
        if errors:
            logger.error("[SHOPIFY] GraphQL errors: %s", errors)
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise TransportError(
                message or "GraphQL error",
                status_code=resp.status_code,
                errors=errors if isinstance(errors, list) else [errors],
            )
        return result.get("data") or {}

    async def find_existing_product(self, title: str) -> Optional[DestinationProductRef]:
        """Best-effort title search; an exact title hit is preferred over the first result."""
        if not title:
            return None
        data = await self.execute(FIND_PRODUCTS_QUERY, {"query": title_search_query(title)})
        edges = ((data.get("products") or {}).get("edges")) or []
        nodes: List[Dict[str, Any]] = [e.get("node") for e in edges if isinstance(e, dict) and e.get("node")]
        if not nodes:
            return None
        exact = next((n for n in nodes if n.get("title") == title), None)
        hit = exact or nodes[0]
        return DestinationProductRef(id=hit["id"], title=hit.get("title") or title)
