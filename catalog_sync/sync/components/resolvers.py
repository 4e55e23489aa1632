# catalog_sync/sync/components/resolvers.py
# --------------------------------------------------------------------------------------
# The string-keyed joins of the bridge, kept in one place so the join strategy
# (by text today, by id later) can change without touching formatter/reconciler:
#   - option label  -> Magento attribute code   (reverse label lookup)
#   - variant image -> Shopify media id         (alt text equality)
#   - formatted variant -> Shopify default variant (selected options)
# --------------------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from catalog_sync.magento.attribute_loader import AttributeMaps
from catalog_sync.models import CanonicalVariant
from catalog_sync.shopify.models import DestinationMedia, DestinationVariantNode

logger = logging.getLogger(__name__)

MATCH_LITERAL = "literal"
MATCH_VALUE = "value"


class OptionCodeResolver:
    """Option label -> attribute code, through the schema's label map."""

    def __init__(self, maps: AttributeMaps):
        self.maps = maps
        self._cache: dict = {}

    def code_for(self, option_name: str) -> Optional[str]:
        if option_name not in self._cache:
            self._cache[option_name] = self.maps.code_for_label(option_name)
        return self._cache[option_name]


class AltTextMediaResolver:
    """Variant image -> media id by exact alt text; first node wins, None when absent."""

    def __init__(self, media_nodes: Iterable[DestinationMedia]):
        self.nodes: List[DestinationMedia] = list(media_nodes or [])

    def extend(self, media_nodes: Iterable[DestinationMedia]) -> None:
        self.nodes.extend(media_nodes or [])

    def media_id_for(self, variant: CanonicalVariant) -> Optional[str]:
        if variant.media is None:
            return None
        alt = variant.media.alt_text
        for node in self.nodes:
            if node.alt == alt:
                return node.id
        return None


class DefaultVariantMatcher:
    """
    Decides which formatted variant the platform's auto-generated default variant stands for.

    literal: every (optionName, valueName) pair needs a selected option with
             name == optionName and value == optionName. Historical behaviour,
             kept as the default. Real option values rarely equal their option
             name, so configurable products normally get no match: the platform's
             default variant stays untracked and every variant is bulk created.
             Standalone products (no option values) still patch it.
    value:   value == valueName.
    A variant with no option values matches any default variant.
    """

    def __init__(self, mode: str = MATCH_LITERAL):
        mode = (mode or MATCH_LITERAL).strip().lower()
        if mode not in (MATCH_LITERAL, MATCH_VALUE):
            raise ValueError(f"unknown default variant match mode: {mode!r}")
        self.mode = mode

    def matches(self, variant: CanonicalVariant, default_node: DestinationVariantNode) -> bool:
        selected = default_node.selected_options
        for pair in variant.option_values:
            expected = pair.option_name if self.mode == MATCH_LITERAL else pair.value_name
            if not any(o.name == pair.option_name and o.value == expected for o in selected):
                return False
        return True

    def select(
        self,
        variants: Sequence[CanonicalVariant],
        default_node: Optional[DestinationVariantNode],
    ) -> Tuple[Optional[CanonicalVariant], List[CanonicalVariant]]:
        """(variant to patch onto the default, variants still to create). First match wins."""
        if default_node is None:
            return None, list(variants)
        matched: Optional[CanonicalVariant] = None
        remaining: List[CanonicalVariant] = []
        extra = 0
        for v in variants:
            if matched is None and self.matches(v, default_node):
                matched = v
                continue
            if matched is not None and self.matches(v, default_node):
                extra += 1
            remaining.append(v)
        if extra:
            logger.warning(
                "[RECONCILE] %d additional variants also match default variant %s; only %s is patched",
                extra, default_node.id, matched.sku if matched else None,
            )
        return matched, remaining
