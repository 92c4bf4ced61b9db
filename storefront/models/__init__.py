from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.variant import ProductSize, ProductColor
from storefront.models.image import ProductImage
from storefront.models.user import User
from storefront.models.cart import Cart, CartItem
from storefront.models.order import Order, OrderItem
from storefront.models.promotion import Promotion
from storefront.models.news import News
from storefront.models.settings import Settings

__all__ = [
    "Category",
    "Product",
    "ProductSize",
    "ProductColor",
    "ProductImage",
    "User",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "Promotion",
    "News",
    "Settings",
]
