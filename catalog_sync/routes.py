#=======================================================================================
# catalog_sync/routes.py
# FastAPI routes for the Magento → Shopify review/sync flow.
#
# ✅ Everything lives under /api/* and requires HTTP Basic (admin)
# ✅ Collaborators come from dependencies so tests can swap them out
#=======================================================================================
from __future__ import annotations

import logging
import secrets
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, Field

from catalog_sync.config import Settings, SyncOptions, get_settings
from catalog_sync.magento.client import MagentoClient
from catalog_sync.models import CanonicalProduct
from catalog_sync.shopify.client import ShopifyClient
from catalog_sync.sync.product_sync import (
    fetch_new_products,
    find_existing_products,
    summarize_results,
    sync_products_batch,
)
from catalog_sync.sync.reconcile import ProductReconciler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Catalog Sync API"])

# ---------------------------
# HTTP Basic
# ---------------------------
security = HTTPBasic()


def verify_admin(
    credentials: HTTPBasicCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
):
    ok_user = secrets.compare_digest(credentials.username or "", settings.ADMIN_USER or "")
    ok_pass = secrets.compare_digest(credentials.password or "", settings.ADMIN_PASS or "")
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )


# ---------------------------
# Collaborators
# ---------------------------
def get_magento_client(settings: Settings = Depends(get_settings)) -> MagentoClient:
    return MagentoClient(settings.magento())


def get_shopify_client(settings: Settings = Depends(get_settings)) -> ShopifyClient:
    return ShopifyClient(settings.shopify())


def get_sync_options(settings: Settings = Depends(get_settings)) -> SyncOptions:
    return settings.sync_options()


# ---------------------------
# Request bodies
# ---------------------------
class FindProductsRequest(BaseModel):
    product_titles: List[str] = Field(default_factory=list, alias="productTitles")

    class Config:
        populate_by_name = True


# ---------------------------
# Routes
# ---------------------------
@router.get("/magento/products", dependencies=[Depends(verify_admin)])
async def api_fetch_magento_products(
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    magento=Depends(get_magento_client),
    shopify=Depends(get_shopify_client),
    options: SyncOptions = Depends(get_sync_options),
):
    result = await fetch_new_products(magento, shopify, options, from_date, to_date)
    result["products"] = [p.wire() for p in result["products"]]
    return result


@router.post("/shopify/products/find", dependencies=[Depends(verify_admin)])
async def api_find_shopify_products(
    body: FindProductsRequest,
    shopify=Depends(get_shopify_client),
    options: SyncOptions = Depends(get_sync_options),
):
    return await find_existing_products(shopify, body.product_titles, options.concurrency)


@router.post("/shopify/products", dependencies=[Depends(verify_admin)])
async def api_create_shopify_products(
    products: List[CanonicalProduct],
    shopify=Depends(get_shopify_client),
    options: SyncOptions = Depends(get_sync_options),
):
    reconciler = ProductReconciler(shopify, options)
    results = await sync_products_batch(reconciler, products, options.concurrency)
    summary = summarize_results(results)
    logger.info(
        "[SYNC] /api/shopify/products: %d created, %d augmented, %d failed",
        summary["created"], summary["augmented"], summary["failed"],
    )
    return summary
