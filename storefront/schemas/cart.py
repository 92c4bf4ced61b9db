from typing import Optional

from pydantic import Field

from storefront.schemas.base import RequestModel


class AddToCart(RequestModel):
    product_id: int
    quantity: int = Field(ge=1)
    size: Optional[str] = None
    color: Optional[str] = None


class CartItemUpdate(RequestModel):
    quantity: int = Field(ge=1)


class OrderCreate(RequestModel):
    cart_id: int
