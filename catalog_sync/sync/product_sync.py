# catalog_sync/sync/product_sync.py
# =======================================================
# Magento → Shopify pipeline driver
# - creation date window resolution
# - fetch: metadata → window listing → families → canonical products
#          → existing Shopify product lookup by title
# - sync:  bounded fan-out over the reconciler, one SyncResult per product
# =======================================================
from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from catalog_sync.config import SyncOptions
from catalog_sync.errors import CatalogSyncError
from catalog_sync.magento.attribute_loader import load_attribute_maps
from catalog_sync.magento.grouping import group_into_families
from catalog_sync.models import CanonicalProduct, SyncResult, SyncStatus
from catalog_sync.sync.formatter import ProductFormatter

logger = logging.getLogger(__name__)

ENABLED_STATUS = 1
DAY_START = "00:00:00"
DAY_END = "23:59:59"


def resolve_date_window(
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[str, str]:
    """
    Inclusive creation window as Magento timestamps.
      neither given -> yesterday .. today
      only to_date  -> to_date .. to_date
      only from     -> from_date .. today
    """
    today = today or date.today()
    from_date = (from_date or "").strip() or None
    to_date = (to_date or "").strip() or None

    if from_date is None and to_date is None:
        from_date = (today - timedelta(days=1)).isoformat()
        to_date = today.isoformat()
    elif from_date is None:
        from_date = to_date
    elif to_date is None:
        to_date = today.isoformat()

    return f"{from_date} {DAY_START}", f"{to_date} {DAY_END}"


async def _bounded_gather(coros: Sequence[Any], limit: int) -> List[Any]:
    sem = asyncio.Semaphore(max(1, int(limit or 1)))

    async def _run(coro):
        async with sem:
            return await coro

    return await asyncio.gather(*(_run(c) for c in coros))


async def find_existing_products(shopify, titles: Sequence[str], concurrency: int = 4) -> List[Dict[str, str]]:
    """[{title, id}] for every title that already has a Shopify product."""
    titles = [t for t in titles or [] if t]
    refs = await _bounded_gather([shopify.find_existing_product(t) for t in titles], concurrency)
    out = []
    for title, ref in zip(titles, refs):
        if ref is not None:
            out.append({"title": title, "id": ref.id})
    logger.info("[SYNC] %d of %d titles already exist in Shopify", len(out), len(titles))
    return out


async def fetch_new_products(
    magento,
    shopify,
    options: Optional[SyncOptions] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the review payload for every product created inside the window.
    MetadataError / TransportError propagate; nothing is written anywhere.
    """
    options = options or SyncOptions()
    window_from, window_to = resolve_date_window(from_date, to_date)

    maps = await load_attribute_maps(magento)
    records = await magento.fetch_source_products(window_from, window_to)
    enabled = [r for r in records if r.status == ENABLED_STATUS]
    if len(enabled) != len(records):
        logger.info("[SYNC] %d disabled products skipped", len(records) - len(enabled))

    report = await group_into_families(enabled, magento.fetch_configurable_candidates)

    formatter = ProductFormatter(maps, options)
    products: List[CanonicalProduct] = [formatter.format(f) for f in report.families]

    existing = await find_existing_products(shopify, [p.title for p in products], options.concurrency)
    ids_by_title = {e["title"]: e["id"] for e in existing}
    for p in products:
        p.existing_destination_id = ids_by_title.get(p.title)

    stats = report.stats()
    stats["source_records"] = len(records)
    stats["disabled_skipped"] = len(records) - len(enabled)
    stats["existing_in_destination"] = len(existing)

    logger.info("[SYNC] %d products ready for review (%s .. %s)", len(products), window_from, window_to)
    return {
        "products": products,
        "total_count": len(products),
        "from_date": window_from,
        "to_date": window_to,
        "stats": stats,
    }


async def _sync_one(reconciler, product: CanonicalProduct) -> SyncResult:
    try:
        return await reconciler.reconcile(product)
    except Exception as e:
        logger.error("[BATCH] %r failed: %s", product.title, e, exc_info=True)
        error = str(e) or e.__class__.__name__
        partial = e.partial_result if isinstance(e, CatalogSyncError) else None
        if partial is not None:
            # destination id and advisories of anything already written
            return partial.model_copy(update={"status": SyncStatus.FAILED, "error": error})
        return SyncResult(
            title=product.title,
            sku=product.sku,
            status=SyncStatus.FAILED,
            destination_id=product.existing_destination_id,
            error=error,
        )


async def sync_products_batch(
    reconciler,
    products: Sequence[CanonicalProduct],
    concurrency: int = 4,
) -> List[SyncResult]:
    """
    Reconcile every product; results keep input order. A failing product is
    reported as FAILED and never cancels the others.
    """
    results = await _bounded_gather([_sync_one(reconciler, p) for p in products or []], concurrency)
    failed = sum(1 for r in results if r.status == SyncStatus.FAILED)
    logger.info("[BATCH] batch done: %d products, %d failed", len(results), failed)
    return results


def summarize_results(results: Sequence[SyncResult]) -> Dict[str, Any]:
    counts = {s.value: 0 for s in SyncStatus}
    for r in results:
        counts[r.status.value] += 1
    return {
        "results": [r.wire() for r in results],
        "created": counts[SyncStatus.CREATED.value],
        "augmented": counts[SyncStatus.AUGMENTED.value],
        "failed": counts[SyncStatus.FAILED.value],
    }
