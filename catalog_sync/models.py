# catalog_sync/models.py
# --------------------------------------------------------------------------------------
# Platform-agnostic product shape handed from the formatter to the review UI and to
# the Shopify reconciler. Python attributes are snake_case; the wire is camelCase.
# --------------------------------------------------------------------------------------
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from catalog_sync.magento.models import MagentoProduct


class _Wire(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ProductStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DRAFT = "DRAFT"
    ARCHIVED = "ARCHIVED"


class CanonicalOptionValue(_Wire):
    name: str


class CanonicalOption(_Wire):
    name: str
    values: List[CanonicalOptionValue] = Field(default_factory=list)

    def value_names(self) -> List[str]:
        return [v.name for v in self.values]


class VariantOptionValue(_Wire):
    option_name: str
    value_name: str


class CanonicalMedia(_Wire):
    url: str
    alt_text: str = ""
    kind: str = "IMAGE"


class Metafield(_Wire):
    key: str
    namespace: str
    type: str = "string"
    value: str


class CanonicalVariant(_Wire):
    price: str
    sku: str
    option_values: List[VariantOptionValue] = Field(default_factory=list)
    media: Optional[CanonicalMedia] = None


class CanonicalProduct(_Wire):
    title: str
    sku: str
    description_html: str = ""
    vendor: str = ""
    product_type: str = ""
    tags: List[str] = Field(default_factory=list)
    status: ProductStatus = ProductStatus.DRAFT
    options: List[CanonicalOption] = Field(default_factory=list)
    variants: List[CanonicalVariant] = Field(default_factory=list)
    media: List[CanonicalMedia] = Field(default_factory=list)
    metafields: List[Metafield] = Field(default_factory=list)
    existing_destination_id: Optional[str] = None

    def option_names(self) -> List[str]:
        return [o.name for o in self.options]


class Family(BaseModel):
    """A configurable parent with its simple children, or a standalone simple (no parent, one child)."""
    parent: Optional[MagentoProduct] = None
    children: List[MagentoProduct] = Field(default_factory=list)

    @property
    def is_standalone(self) -> bool:
        return self.parent is None and len(self.children) == 1


class SyncStatus(str, Enum):
    CREATED = "created"
    AUGMENTED = "augmented"
    FAILED = "failed"


class SyncResult(_Wire):
    title: str
    sku: str = ""
    status: SyncStatus
    destination_id: Optional[str] = None
    variants_created: int = 0
    default_variant_updated: bool = False
    advisories: List[str] = Field(default_factory=list)
    error: Optional[str] = None
