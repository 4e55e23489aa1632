# catalog_sync/sync/formatter.py
# =======================================================
# Magento family → CanonicalProduct
# - configurable option resolution (attribute id → label → code → option labels)
# - variant formatting (option values, price, primary image)
# - option list recomputed from the variants actually present
# - tags / vendor / description / type / status / media / metafields
# =======================================================
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from catalog_sync.config import SyncOptions
from catalog_sync.magento.attribute_loader import AttributeMaps
from catalog_sync.magento.models import MagentoProduct
from catalog_sync.models import (
    CanonicalMedia,
    CanonicalOption,
    CanonicalOptionValue,
    CanonicalProduct,
    CanonicalVariant,
    Family,
    Metafield,
    ProductStatus,
    VariantOptionValue,
)
from catalog_sync.sync.components.media import gallery_media, image_join_keys, primary_image
from catalog_sync.sync.components.options import (
    collect_used_option_values,
    keep_distinguishing,
    restrict_variants_to_options,
)
from catalog_sync.sync.components.resolvers import OptionCodeResolver
from catalog_sync.sync.components.util import dedupe_preserve_order, format_price, stringify_value

logger = logging.getLogger(__name__)

ATTR_CATEGORY_IDS = "category_ids"
ATTR_BRAND = "brand"
ATTR_MANUFACTURER = "manufacturer"
ATTR_DESCRIPTION = "description"
ATTR_PRODUCT_TYPE = "product_type"


class ProductFormatter:
    def __init__(self, maps: AttributeMaps, options: Optional[SyncOptions] = None):
        self.maps = maps
        self.options = options or SyncOptions()
        self.codes = OptionCodeResolver(maps)

    # ---- entry point ----

    def format(self, family: Family) -> CanonicalProduct:
        if family.parent is not None:
            return self.format_configurable(family.parent, family.children)
        if len(family.children) != 1:
            raise ValueError(f"a family without a parent needs exactly one child, got {len(family.children)}")
        return self.format_standalone(family.children[0])

    # ---- configurable ----

    def resolve_options(self, parent: MagentoProduct) -> List[CanonicalOption]:
        """Configurable option definitions with human labels; single-value options dropped."""
        resolved: List[CanonicalOption] = []
        for opt in parent.extension_attributes.configurable_product_options:
            name = self.maps.label_for_id(opt.attribute_id) or opt.label
            code = self.codes.code_for(name)
            labels = dedupe_preserve_order(
                self.maps.option_label(code, v.value_index) or str(v.value_index)
                for v in opt.values
            )
            if len(labels) < 2:
                logger.debug("[FORMAT] %s: option %r has %d value(s), dropped", parent.sku, name, len(labels))
                continue
            resolved.append(CanonicalOption(name=name, values=[CanonicalOptionValue(name=lbl) for lbl in labels]))
        return resolved

    def format_configurable(self, parent: MagentoProduct, children: Sequence[MagentoProduct]) -> CanonicalProduct:
        defined = self.resolve_options(parent)
        keys = image_join_keys(children)
        variants = [self.format_variant(child, defined, keys[child.id]) for child in children]

        # The definition may list values no child carries; only what the
        # variants hold becomes a selectable option.
        options = keep_distinguishing(collect_used_option_values(variants))
        variants = restrict_variants_to_options(variants, options)

        media: List[CanonicalMedia] = []
        for child in children:
            img = primary_image(child, self.options.media_base_url, keys[child.id])
            if img is not None:
                media.append(img)

        if not children:
            logger.info("[FORMAT] configurable %s has no matched children; formatted without variants", parent.sku)

        return CanonicalProduct(
            title=parent.name,
            sku=parent.sku,
            description_html=self._text(parent, ATTR_DESCRIPTION),
            vendor=self._brand(parent),
            product_type=self._text(parent, ATTR_PRODUCT_TYPE),
            tags=self._tags(parent),
            status=self._status(parent),
            options=options,
            variants=variants,
            media=media,
            metafields=self.build_metafields(parent),
        )

    # ---- standalone ----

    def format_standalone(self, record: MagentoProduct) -> CanonicalProduct:
        vendor = self._brand(record) or stringify_value(record.custom_attribute(ATTR_MANUFACTURER))
        return CanonicalProduct(
            title=record.name,
            sku=record.sku,
            description_html=self._text(record, ATTR_DESCRIPTION),
            vendor=vendor,
            product_type=self._text(record, ATTR_PRODUCT_TYPE),
            tags=self._tags(record),
            status=self._status(record),
            options=[],
            variants=[self.format_variant(record, [])],
            media=gallery_media(record, self.options.media_base_url),
            metafields=self.build_metafields(record),
        )

    # ---- variants ----

    def format_variant(
        self,
        record: MagentoProduct,
        options: Sequence[CanonicalOption],
        image_key: Optional[str] = None,
    ) -> CanonicalVariant:
        pairs: List[VariantOptionValue] = []
        for opt in options:
            code = self.codes.code_for(opt.name)
            raw = record.custom_attribute(code)
            label = self.maps.option_label(code, raw)
            pairs.append(VariantOptionValue(
                option_name=opt.name,
                value_name=label if label is not None else stringify_value(raw),
            ))
        return CanonicalVariant(
            price=format_price(record.price),
            sku=record.sku,
            option_values=pairs,
            media=primary_image(record, self.options.media_base_url, image_key),
        )

    # ---- product-level fields ----

    def build_metafields(self, record: MagentoProduct) -> List[Metafield]:
        deny = set(self.options.metafield_deny_list or ())
        seen = set()
        out: List[Metafield] = []
        for attr in record.custom_attributes:
            if attr.attribute_code in seen:
                continue
            seen.add(attr.attribute_code)
            key = self.maps.label_for_code(attr.attribute_code) or attr.attribute_code
            if key in deny:
                continue
            out.append(Metafield(
                key=key,
                namespace=self.options.metafield_namespace,
                type="string",
                value=stringify_value(attr.value),
            ))
        return out

    def _tags(self, record: MagentoProduct) -> List[str]:
        raw = record.custom_attribute(ATTR_CATEGORY_IDS)
        if raw is None:
            return []
        if not isinstance(raw, (list, tuple)):
            raw = [raw]
        return dedupe_preserve_order(str(v) for v in raw)

    def _brand(self, record: MagentoProduct) -> str:
        return self.maps.option_label(ATTR_BRAND, record.custom_attribute(ATTR_BRAND)) or ""

    @staticmethod
    def _text(record: MagentoProduct, code: str) -> str:
        return stringify_value(record.custom_attribute(code))

    @staticmethod
    def _status(record: MagentoProduct) -> ProductStatus:
        return ProductStatus.ACTIVE if record.status == 1 else ProductStatus.DRAFT


def format_family(family: Family, maps: AttributeMaps, options: Optional[SyncOptions] = None) -> CanonicalProduct:
    return ProductFormatter(maps, options).format(family)
