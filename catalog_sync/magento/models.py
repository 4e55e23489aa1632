from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any


def _as_str(v: Any) -> Any:
    return str(v) if isinstance(v, (int, float)) and not isinstance(v, bool) else v


class AttributeOption(BaseModel):
    label: str = ""
    value: str = ""

    @field_validator("label", "value", mode="before")
    @classmethod
    def _stringify(cls, v):
        return "" if v is None else _as_str(v)

    class Config:
        extra = "allow"


class AttributeMetadata(BaseModel):
    attribute_id: str
    attribute_code: str
    default_frontend_label: Optional[str] = None
    frontend_input: Optional[str] = None
    options: List[AttributeOption] = Field(default_factory=list)

    @field_validator("attribute_id", mode="before")
    @classmethod
    def _id_to_str(cls, v):
        return _as_str(v)

    @field_validator("options", mode="before")
    @classmethod
    def _none_options(cls, v):
        return v or []

    class Config:
        extra = "allow"


class CustomAttribute(BaseModel):
    attribute_code: str
    value: Any = None

    class Config:
        extra = "allow"


class MediaGalleryEntry(BaseModel):
    id: Optional[int] = None
    media_type: str = "image"
    label: Optional[str] = None
    position: int = 0
    disabled: bool = False
    types: List[str] = Field(default_factory=list)
    file: str = ""

    class Config:
        extra = "allow"


class OptionValueIndex(BaseModel):
    value_index: int


class ConfigurableProductOption(BaseModel):
    id: Optional[int] = None
    attribute_id: str
    label: str = ""
    position: int = 0
    values: List[OptionValueIndex] = Field(default_factory=list)

    @field_validator("attribute_id", mode="before")
    @classmethod
    def _id_to_str(cls, v):
        return _as_str(v)

    class Config:
        extra = "allow"


class ExtensionAttributes(BaseModel):
    configurable_product_options: List[ConfigurableProductOption] = Field(default_factory=list)
    configurable_product_links: List[int] = Field(default_factory=list)

    class Config:
        extra = "allow"


class MagentoProduct(BaseModel):
    id: int
    sku: str
    name: str = ""
    price: float = 0
    status: int = 1
    visibility: Optional[int] = None
    type_id: str = "simple"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    custom_attributes: List[CustomAttribute] = Field(default_factory=list)
    media_gallery_entries: List[MediaGalleryEntry] = Field(default_factory=list)
    extension_attributes: ExtensionAttributes = Field(default_factory=ExtensionAttributes)

    @field_validator("price", mode="before")
    @classmethod
    def _none_price(cls, v):
        return 0 if v is None else v

    @field_validator("custom_attributes", "media_gallery_entries", mode="before")
    @classmethod
    def _none_list(cls, v):
        return v or []

    @field_validator("extension_attributes", mode="before")
    @classmethod
    def _none_ext(cls, v):
        return v or {}

    class Config:
        extra = "allow"

    @property
    def is_configurable(self) -> bool:
        return self.type_id == "configurable"

    def custom_attribute(self, code: Optional[str]) -> Any:
        """Value of the first custom attribute with this code, or None."""
        if not code:
            return None
        for attr in self.custom_attributes:
            if attr.attribute_code == code:
                return attr.value
        return None

    def gallery(self) -> List[MediaGalleryEntry]:
        return [e for e in self.media_gallery_entries if not e.disabled and e.file]
