import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from storefront.errors import InvalidOperation, NotFound
from storefront.extensions import db
from storefront.models.cart import Cart, CartItem
from storefront.models.product import STANDALONE, Product
from storefront.services import product_service, product_type_service

logger = logging.getLogger(__name__)


def get_or_create_cart(user_id):
    """Return the user's cart, creating an empty one on first access."""
    cart = Cart.query.filter_by(user_id=user_id).first()
    if cart is not None:
        return cart

    cart = Cart(user_id=user_id)
    db.session.add(cart)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request created it first.
        db.session.rollback()
        cart = Cart.query.filter_by(user_id=user_id).first()
        if cart is None:
            raise
    else:
        logger.info("Created cart %d for user %d", cart.id, user_id)
    return cart


def available_quantity(product):
    """Stock that backs a purchasable record.

    Standalone variants hold no stock of their own; the base does.
    """
    if product.product_type == STANDALONE and product.parent is not None:
        return product.parent.quantity
    return product.quantity


def unit_price(product, size=None):
    """Variant price, else the declared size price, else 0."""
    if product.price is not None:
        return product.price
    lookup = size or product.size
    if lookup:
        declared = product.find_size(lookup)
        if declared is None and product.parent is not None:
            declared = product.parent.find_size(lookup)
        if declared is not None:
            return declared.price
    return 0


def _resolve_purchasable(product, size, color):
    if product.is_base:
        if product.product_type == STANDALONE:
            if not size:
                raise InvalidOperation(
                    "Size is required when adding a standalone product to cart"
                )
            return product_service.get_or_create_standalone_variant(product.id, size, color)
        raise InvalidOperation(
            f"Product {product.id} is a variant-based base product. "
            "Add one of its variants by variant ID instead."
        )
    return product


def add_to_cart(user_id, product_id, quantity, size=None, color=None):
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFound(f"Product with ID {product_id} not found")

    resolved = _resolve_purchasable(product, size, color)
    product_type_service.assert_purchasable(resolved)

    # The line's size is the SKU's own size; a conflicting request is an error.
    if size and resolved.size and size != resolved.size:
        raise InvalidOperation(
            f'Product {resolved.id} is size "{resolved.size}", not "{size}"'
        )
    line_size = resolved.size or size
    cart = get_or_create_cart(user_id)
    existing = CartItem.query.filter_by(
        cart_id=cart.id, product_id=resolved.id, size=line_size
    ).first()

    wanted = quantity + (existing.quantity if existing else 0)
    available = available_quantity(resolved)
    if available < wanted:
        raise InvalidOperation(
            f"Insufficient product quantity: requested {wanted}, available {available}"
        )

    if existing is not None:
        existing.quantity = wanted
        item = existing
    else:
        item = CartItem(
            cart_id=cart.id,
            product_id=resolved.id,
            size=line_size,
            quantity=quantity,
            price=unit_price(resolved, line_size),
        )
        db.session.add(item)
    cart.updated_at = datetime.now(timezone.utc)
    db.session.commit()

    logger.info(
        "Cart %d: %s product %d size=%s qty=%d",
        cart.id,
        "merged" if existing is not None else "added",
        resolved.id,
        line_size,
        item.quantity,
    )
    return item


def _get_user_item(user_id, item_id):
    cart = get_or_create_cart(user_id)
    item = CartItem.query.filter_by(id=item_id, cart_id=cart.id).first()
    if item is None:
        raise NotFound(f"Cart item with ID {item_id} not found")
    return item


def update_cart_item(user_id, item_id, quantity):
    """Set a line's quantity. The price snapshot is left as is."""
    item = _get_user_item(user_id, item_id)

    available = available_quantity(item.product)
    if available < quantity:
        raise InvalidOperation(
            f"Insufficient product quantity: requested {quantity}, available {available}"
        )

    item.quantity = quantity
    item.cart.updated_at = datetime.now(timezone.utc)
    db.session.commit()
    return item


def remove_from_cart(user_id, item_id):
    item = _get_user_item(user_id, item_id)
    item.cart.updated_at = datetime.now(timezone.utc)
    db.session.delete(item)
    db.session.commit()
    return item_id


def clear_cart(user_id):
    cart = get_or_create_cart(user_id)
    count = CartItem.query.filter_by(cart_id=cart.id).delete()
    db.session.commit()
    return count


def get_cart_by_id(cart_id):
    cart = db.session.get(Cart, cart_id)
    if cart is None:
        raise NotFound(f"Cart with ID {cart_id} not found")
    return cart


def get_all_carts():
    return Cart.query.order_by(Cart.updated_at.desc(), Cart.id.desc()).all()
