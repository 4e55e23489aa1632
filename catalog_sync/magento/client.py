#==========================================================================================
# catalog_sync/magento/client.py
# Magento REST interface: attribute schema, products by creation window,
# configurable candidates by name fragment.
#==========================================================================================
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx

from catalog_sync.config import MagentoConfig
from catalog_sync.errors import TransportError
from catalog_sync.logging_filters import summarize_html
from catalog_sync.magento.models import MagentoProduct

logger = logging.getLogger(__name__)

Params = List[Tuple[str, Any]]


def _filter(group: int, idx: int, field: str, value: Any, condition: str) -> Params:
    prefix = f"searchCriteria[filterGroups][{group}][filters][{idx}]"
    return [
        (f"{prefix}[field]", field),
        (f"{prefix}[value]", value),
        (f"{prefix}[condition_type]", condition),
    ]


def created_window_params(from_date: str, to_date: str, page_size: int) -> Params:
    params: Params = []
    params += _filter(0, 0, "created_at", from_date, "gteq")
    params += _filter(1, 0, "created_at", to_date, "lteq")
    params += [
        ("searchCriteria[sortOrders][0][field]", "created_at"),
        ("searchCriteria[sortOrders][0][direction]", "DESC"),
        ("searchCriteria[pageSize]", page_size),
        ("searchCriteria[currentPage]", 1),
    ]
    return params


def configurable_name_params(fragments: Iterable[str]) -> Params:
    """Filters inside one group are OR'ed by Magento; groups are AND'ed."""
    params: Params = []
    for idx, frag in enumerate(fragments):
        params += _filter(0, idx, "name", f"%{frag}%", "like")
    params += _filter(1, 0, "type_id", "configurable", "eq")
    return params


class MagentoClient:
    def __init__(self, config: MagentoConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_token}",
            "Content-Type": "application/json",
        }

    async def _get(self, path: str, params: Params) -> Dict[str, Any]:
        url = f"{self.config.api_url}{path}"
        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            verify=self.config.verify_tls,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.get(url, headers=self._headers(), params=params)
            except httpx.HTTPError as e:
                raise TransportError(f"Magento request to {path} failed: {e}") from e

        if resp.status_code != 200:
            body = resp.text or ""
            logger.error("[MAGENTO] %s -> HTTP %s: %s", path, resp.status_code, summarize_html(body) if "<html" in body.lower() else body[:300])
            raise TransportError(
                f"Magento API responded with status {resp.status_code} for {path}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"Magento returned a non-JSON body for {path}", status_code=resp.status_code) from e

    # ---- Attributes ----

    async def fetch_attribute_schema(self) -> Dict[str, Any]:
        """Single, sufficiently large page of the attribute schema."""
        params: Params = [
            ("searchCriteria[pageSize]", self.config.attribute_page_size),
            ("searchCriteria[currentPage]", 1),
        ]
        data = await self._get("/rest/V1/products/attributes", params)
        logger.info("[MAGENTO] fetched %d attribute definitions", len(data.get("items") or []))
        return data

    # ---- Products ----

    async def fetch_source_products(self, from_date: str, to_date: str) -> List[MagentoProduct]:
        """Products created inside [from_date, to_date], newest first (one page)."""
        params = created_window_params(from_date, to_date, self.config.page_size)
        data = await self._get("/rest/V1/products", params)
        items = [MagentoProduct.model_validate(i) for i in (data.get("items") or [])]
        logger.info("[MAGENTO] %d products created between %s and %s", len(items), from_date, to_date)
        return items

    async def fetch_configurable_candidates(self, fragments: Iterable[str]) -> List[MagentoProduct]:
        frags = [f for f in fragments if f]
        if not frags:
            return []
        data = await self._get("/rest/V1/products", configurable_name_params(frags))
        items = [MagentoProduct.model_validate(i) for i in (data.get("items") or [])]
        configurables = [p for p in items if p.is_configurable]
        logger.info("[MAGENTO] %d configurable candidates for %d name fragments", len(configurables), len(frags))
        return configurables
