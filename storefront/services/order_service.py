import logging

from storefront.errors import InvalidOperation, NotFound
from storefront.extensions import db
from storefront.models.cart import Cart, CartItem
from storefront.models.order import Order, OrderItem
from storefront.models.product import STANDALONE, Product

logger = logging.getLogger(__name__)


def _stock_holder_id(product):
    if product.product_type == STANDALONE and product.parent_product_id is not None:
        return product.parent_product_id
    return product.id


def _reserve_stock(holder_id, quantity):
    """Atomically take ``quantity`` units off a product; False if short."""
    result = db.session.execute(
        db.update(Product)
        .where(Product.id == holder_id, Product.quantity >= quantity)
        .values(quantity=Product.quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _refresh_sold_out(holder_ids):
    for holder_id in holder_ids:
        holder = db.session.get(Product, holder_id)
        db.session.refresh(holder)
        holder.sold_out = holder.quantity == 0
        if holder.product_type == STANDALONE and holder.is_base:
            for variant in holder.variants:
                variant.sold_out = holder.sold_out


def create_order_from_cart(cart_id):
    """Turn a cart into a pending order and empty the cart.

    Stock is decremented with conditional updates inside the same
    transaction; one short line fails the whole order.
    """
    cart = db.session.get(Cart, cart_id)
    if cart is None:
        raise NotFound(f"Cart with ID {cart_id} not found")
    if not cart.items:
        raise InvalidOperation("Cart is empty. Cannot create order from empty cart.")

    # Collapse lines sharing a stock holder (e.g. two sizes of one standalone base).
    demand = {}
    for item in cart.items:
        holder_id = _stock_holder_id(item.product)
        demand[holder_id] = demand.get(holder_id, 0) + item.quantity

    try:
        for holder_id, quantity in demand.items():
            if not _reserve_stock(holder_id, quantity):
                raise InvalidOperation(
                    f"Insufficient product quantity for product {holder_id}"
                )
        _refresh_sold_out(demand)

        order = Order(
            user_id=cart.user_id,
            cart_id=cart.id,
            total_amount=sum(item.price * item.quantity for item in cart.items),
            status="pending",
            items=[
                OrderItem(
                    product_id=item.product_id,
                    title=item.product.title,
                    size=item.size,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in cart.items
            ],
        )
        db.session.add(order)
        CartItem.query.filter_by(cart_id=cart.id).delete()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Created order %d from cart %d (%d lines, total %s)",
        order.id,
        cart_id,
        len(order.items),
        order.total_amount,
    )
    return order


def list_orders():
    return Order.query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(order_id):
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound(f"Order with ID {order_id} not found")
    return order


def list_orders_for_user(user_id):
    return (
        Order.query.filter_by(user_id=user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
