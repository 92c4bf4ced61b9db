import json
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from storefront.schemas.base import RequestModel

ProductType = Literal["STANDALONE", "VARIANT_BASED"]


class SizeOption(RequestModel):
    size: str
    price: float = Field(ge=0)


class ColorOption(RequestModel):
    color: str


class _ProductOptions(RequestModel):
    """``sizes``/``colors`` lists; forms send them as JSON strings."""

    product_type: Optional[ProductType] = None
    sizes: Optional[List[SizeOption]] = None
    colors: Optional[List[ColorOption]] = None

    @field_validator("product_type", mode="before")
    @classmethod
    def upper_product_type(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("sizes", "colors", mode="before")
    @classmethod
    def parse_json_list(cls, v, info):
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                raise ValueError(f"Invalid JSON format for field {info.field_name}")
        if info.field_name == "colors" and isinstance(v, list):
            v = [{"color": c} if isinstance(c, str) else c for c in v]
        return v

    @field_validator("sizes")
    @classmethod
    def unique_sizes(cls, v):
        seen = set()
        for option in v or []:
            if option.size in seen:
                raise ValueError(f'Duplicate size "{option.size}"')
            seen.add(option.size)
        return v

    @field_validator("colors")
    @classmethod
    def unique_colors(cls, v):
        seen = set()
        for option in v or []:
            if option.color.lower() in seen:
                raise ValueError(f'Duplicate color "{option.color}"')
            seen.add(option.color.lower())
        return v


class ProductCreate(_ProductOptions):
    title: str
    name: str
    description: Optional[str] = None
    note: Optional[str] = None
    quantity: int = Field(ge=0)
    category_id: int


class ProductPatch(_ProductOptions):
    title: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    note: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    price: Optional[float] = Field(default=None, ge=0)
    size: Optional[str] = None
    color: Optional[str] = None


class VariantCreate(RequestModel):
    title: str
    name: str
    description: Optional[str] = None
    note: Optional[str] = None
    quantity: int = Field(ge=0)
    size: str
    color: Optional[str] = None
    price: float = Field(ge=0)


class CategoryCreate(RequestModel):
    name: str
