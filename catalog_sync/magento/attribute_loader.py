# catalog_sync/magento/attribute_loader.py
# --------------------------------------------------------------------------------------
# Attribute id/code/label/option lookup maps built from the Magento attribute schema.
# --------------------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from catalog_sync.errors import MetadataError
from catalog_sync.magento.models import AttributeMetadata, AttributeOption

logger = logging.getLogger(__name__)


class AttributeMaps:
    """
    Process-scoped, read-only lookups:
        id_to_label     "93"    -> "Color"
        code_to_label   "color" -> "Color"
        code_to_options "color" -> [AttributeOption(value="10", label="Red"), ...]
    """
    def __init__(
        self,
        id_to_label: Optional[Dict[str, str]] = None,
        code_to_label: Optional[Dict[str, str]] = None,
        code_to_options: Optional[Dict[str, List[AttributeOption]]] = None,
    ):
        self.id_to_label: Dict[str, str] = dict(id_to_label or {})
        self.code_to_label: Dict[str, str] = dict(code_to_label or {})
        self.code_to_options: Dict[str, List[AttributeOption]] = {
            k: list(v) for k, v in (code_to_options or {}).items()
        }

    def label_for_id(self, attribute_id: Any) -> Optional[str]:
        return self.id_to_label.get(str(attribute_id))

    def label_for_code(self, code: str) -> Optional[str]:
        return self.code_to_label.get(code)

    def code_for_label(self, label: Optional[str]) -> Optional[str]:
        """Reverse lookup label -> code; first code in schema order wins."""
        if label is None:
            return None
        for code, lbl in self.code_to_label.items():
            if lbl == label:
                return code
        return None

    def options_for(self, code: Optional[str]) -> List[AttributeOption]:
        if not code:
            return []
        return self.code_to_options.get(code, [])

    def option_label(self, code: Optional[str], value: Any) -> Optional[str]:
        """Label of the option whose internal value equals `value` (string comparison)."""
        if value is None:
            return None
        wanted = str(value)
        for opt in self.options_for(code):
            if opt.value == wanted:
                return opt.label
        return None


def build_attribute_maps(listing: Any) -> AttributeMaps:
    """
    Pure function of the raw schema listing. Accepts either the Magento response
    envelope ({"items": [...]}) or the bare list of attribute entries.
    Raises MetadataError when an entry has no id or code.
    """
    items = listing.get("items") if isinstance(listing, dict) else listing
    if items is None:
        items = []
    if not isinstance(items, (list, tuple)):
        raise MetadataError(f"attribute listing must be a list, got {type(items).__name__}")

    maps = AttributeMaps()
    for pos, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise MetadataError(f"attribute entry #{pos} is not an object")
        if raw.get("attribute_id") in (None, "") or not raw.get("attribute_code"):
            raise MetadataError(f"attribute entry #{pos} is missing attribute_id or attribute_code")
        try:
            meta = AttributeMetadata.model_validate(raw)
        except ValidationError as e:
            raise MetadataError(f"attribute entry #{pos} ({raw.get('attribute_code')}) is malformed: {e}") from e

        label = meta.default_frontend_label or meta.attribute_code
        maps.id_to_label[meta.attribute_id] = label
        maps.code_to_label[meta.attribute_code] = label

        options = [o for o in meta.options if o.value != "" and o.label != ""]
        if options:
            maps.code_to_options[meta.attribute_code] = options

    logger.debug(
        "[MAGENTO] attribute maps built: %d attributes, %d with options",
        len(maps.code_to_label), len(maps.code_to_options),
    )
    return maps


async def load_attribute_maps(client) -> AttributeMaps:
    """Fetch the schema through the source client and build the lookup maps."""
    listing = await client.fetch_attribute_schema()
    return build_attribute_maps(listing)

