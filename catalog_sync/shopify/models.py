from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any, Dict


def _nodes(v: Any) -> Any:
    """GraphQL connections arrive as {"nodes": [...]} or {"edges": [{"node": ...}]}."""
    if isinstance(v, dict):
        if "nodes" in v:
            return v.get("nodes") or []
        if "edges" in v:
            return [e.get("node") for e in (v.get("edges") or []) if isinstance(e, dict)]
    return v or []


class SelectedOption(BaseModel):
    name: str
    value: str


class DestinationVariantNode(BaseModel):
    id: str
    title: Optional[str] = None
    selected_options: List[SelectedOption] = Field(default_factory=list, alias="selectedOptions")

    class Config:
        populate_by_name = True
        extra = "allow"


class DestinationMedia(BaseModel):
    id: str
    alt: Optional[str] = None

    class Config:
        extra = "allow"


class DestinationProduct(BaseModel):
    id: str
    title: Optional[str] = None
    variants: List[DestinationVariantNode] = Field(default_factory=list)
    media: List[DestinationMedia] = Field(default_factory=list)

    @field_validator("variants", "media", mode="before")
    @classmethod
    def _connection(cls, v):
        return _nodes(v)

    class Config:
        extra = "allow"

    @property
    def default_variant(self) -> Optional[DestinationVariantNode]:
        return self.variants[0] if self.variants else None


class DestinationVariant(BaseModel):
    id: str
    sku: Optional[str] = None
    title: Optional[str] = None

    class Config:
        extra = "allow"


class DestinationProductRef(BaseModel):
    id: str
    title: str


class UserError(BaseModel):
    field: Optional[List[str]] = None
    message: str = ""

    class Config:
        extra = "allow"

    def as_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message}
