# catalog_sync/sync/reconcile.py
# =======================================================
# CanonicalProduct → Shopify product
#   create branch:  productCreate (+ first media batch) → extra media batches →
#                   default variant patch → bulk create of the remaining variants
#   augment branch: productCreateMedia on the existing product → bulk create of
#                   every variant
# userErrors are advisory (logged + recorded); TransportError propagates.
# =======================================================
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from catalog_sync.config import SyncOptions
from catalog_sync.errors import AdvisoryUserError, CatalogSyncError, ReconcileError
from catalog_sync.models import (
    CanonicalMedia,
    CanonicalProduct,
    CanonicalVariant,
    SyncResult,
    SyncStatus,
)
from catalog_sync.shopify.models import DestinationMedia, DestinationProduct, DestinationVariant, UserError
from catalog_sync.shopify.queries import (
    PRODUCT_CREATE_MEDIA_MUTATION,
    PRODUCT_CREATE_MUTATION,
    VARIANTS_BULK_CREATE_MUTATION,
    VARIANTS_BULK_UPDATE_MUTATION,
)
from catalog_sync.sync.components.resolvers import AltTextMediaResolver, DefaultVariantMatcher
from catalog_sync.sync.components.util import chunked

logger = logging.getLogger(__name__)

SEO_DESCRIPTION_LIMIT = 160


# ---- payload builders ----

def media_input(media: CanonicalMedia) -> Dict[str, Any]:
    return {
        "mediaContentType": media.kind,
        "originalSource": media.url,
        "alt": media.alt_text,
    }


def variant_input(variant: CanonicalVariant, media: AltTextMediaResolver) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "price": variant.price,
        "optionValues": [
            {"optionName": p.option_name, "name": p.value_name} for p in variant.option_values
        ],
        "inventoryItem": {"sku": variant.sku, "tracked": True},
    }
    media_id = media.media_id_for(variant)
    if media_id:
        payload["mediaId"] = media_id
    return payload


def product_input(product: CanonicalProduct) -> Dict[str, Any]:
    # Products always land as DRAFT; review happens in the Shopify admin.
    return {
        "title": product.title,
        "descriptionHtml": product.description_html,
        "vendor": product.vendor,
        "productType": product.product_type,
        "status": "DRAFT",
        "productOptions": [
            {"name": o.name, "values": [{"name": v.name} for v in o.values]} for o in product.options
        ],
        "tags": list(product.tags),
        "seo": {
            "title": product.title,
            "description": (product.description_html or "")[:SEO_DESCRIPTION_LIMIT],
        },
        "metafields": [
            {"key": m.key, "namespace": m.namespace, "type": m.type, "value": m.value}
            for m in product.metafields
        ],
    }


class ProductReconciler:
    def __init__(self, client, options: Optional[SyncOptions] = None):
        self.client = client
        self.options = options or SyncOptions()
        self.matcher = DefaultVariantMatcher(self.options.default_variant_match)

    async def reconcile(self, product: CanonicalProduct) -> SyncResult:
        """
        Create or augment one product. On failure the exception carries the result
        built so far (destination id once known, advisories) as `partial_result`.
        """
        augment = bool(product.existing_destination_id)
        result = SyncResult(
            title=product.title,
            sku=product.sku,
            status=SyncStatus.AUGMENTED if augment else SyncStatus.CREATED,
            destination_id=product.existing_destination_id,
        )
        try:
            if augment:
                await self._augment(product, result)
            else:
                await self._create(product, result)
        except CatalogSyncError as e:
            e.partial_result = result
            raise
        return result

    # ---- branches ----

    async def _create(self, product: CanonicalProduct, result: SyncResult) -> None:
        batches = chunked([media_input(m) for m in product.media], self.options.media_batch_size)

        logger.info("[RECONCILE] creating product %r (%d variants)", product.title, len(product.variants))
        data = await self.client.execute(
            PRODUCT_CREATE_MUTATION,
            {"input": product_input(product), "media": batches[0] if batches else []},
        )
        payload = data.get("productCreate") or {}
        self._advise(result, "productCreate", payload.get("userErrors"))

        if not payload.get("product"):
            raise ReconcileError(f"productCreate returned no product for {product.title!r}: {'; '.join(result.advisories)}")
        created = DestinationProduct.model_validate(payload["product"])
        result.destination_id = created.id

        media = AltTextMediaResolver(created.media)
        for batch in batches[1:]:
            media.extend(await self._create_media(created.id, batch, result))

        default_variant, remaining = self.matcher.select(product.variants, created.default_variant)
        if default_variant is not None:
            await self._update_default_variant(created, default_variant, media, result)
        else:
            logger.info("[RECONCILE] %s: no formatted variant matches the default variant", created.id)

        if remaining:
            result.variants_created = await self._bulk_create(created.id, remaining, media, result)

    async def _augment(self, product: CanonicalProduct, result: SyncResult) -> None:
        product_id = product.existing_destination_id
        logger.info("[RECONCILE] augmenting existing product %s (%r)", product_id, product.title)

        media = AltTextMediaResolver([])
        for batch in chunked([media_input(m) for m in product.media], self.options.media_batch_size):
            media.extend(await self._create_media(product_id, batch, result))

        # No guard against variants that already exist: the caller only sends new ones.
        if product.variants:
            result.variants_created = await self._bulk_create(product_id, product.variants, media, result)

    # ---- mutations ----

    async def _create_media(self, product_id: str, batch: List[Dict[str, Any]], result: SyncResult) -> List[DestinationMedia]:
        if not batch:
            return []
        data = await self.client.execute(PRODUCT_CREATE_MEDIA_MUTATION, {"media": batch, "productId": product_id})
        payload = data.get("productCreateMedia") or {}
        self._advise(result, "productCreateMedia", payload.get("mediaUserErrors"))
        return [DestinationMedia.model_validate(m) for m in (payload.get("media") or []) if m]

    async def _update_default_variant(
        self,
        created: DestinationProduct,
        variant: CanonicalVariant,
        media: AltTextMediaResolver,
        result: SyncResult,
    ) -> None:
        # The auto-created default variant is untracked; patch it into the matched variant.
        body = {"id": created.default_variant.id, **variant_input(variant, media)}
        data = await self.client.execute(
            VARIANTS_BULK_UPDATE_MUTATION, {"productId": created.id, "variants": [body]},
        )
        payload = data.get("productVariantsBulkUpdate") or {}
        self._advise(result, "productVariantsBulkUpdate", payload.get("userErrors"))
        result.default_variant_updated = True
        logger.info("[RECONCILE] %s: default variant %s set to sku %s", created.id, created.default_variant.id, variant.sku)

    async def _bulk_create(
        self,
        product_id: str,
        variants: Sequence[CanonicalVariant],
        media: AltTextMediaResolver,
        result: SyncResult,
    ) -> int:
        data = await self.client.execute(
            VARIANTS_BULK_CREATE_MUTATION,
            {"productId": product_id, "variants": [variant_input(v, media) for v in variants]},
        )
        payload = data.get("productVariantsBulkCreate") or {}
        self._advise(result, "productVariantsBulkCreate", payload.get("userErrors"))
        created = [DestinationVariant.model_validate(v) for v in (payload.get("productVariants") or []) if v]
        logger.info("[RECONCILE] %s: %d of %d variants created", product_id, len(created), len(variants))
        return len(created)

    @staticmethod
    def _advise(result: SyncResult, operation: str, user_errors: Optional[List[Dict[str, Any]]]) -> None:
        if not user_errors:
            return
        errors = [UserError.model_validate(e).as_dict() for e in user_errors if isinstance(e, dict)]
        advisory = AdvisoryUserError(operation, errors)
        logger.warning("[RECONCILE] %r advisory %s", result.title, advisory)
        result.advisories.append(str(advisory))
