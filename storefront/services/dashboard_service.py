"""Aggregates for the admin dashboard."""
from datetime import datetime, timedelta, timezone

from storefront.extensions import db
from storefront.models.cart import Cart, CartItem
from storefront.models.category import Category
from storefront.models.order import Order
from storefront.models.product import (
    BASE_PRODUCT,
    STANDALONE,
    VARIANT,
    VARIANT_BASED,
    Product,
)
from storefront.models.promotion import Promotion
from storefront.models.user import User

LOW_STOCK_THRESHOLD = 10
RECENT_DAYS = 7


def _stock_holders():
    """Rows whose quantity is real stock: standalone bases and variant SKUs."""
    return Product.query.filter(
        db.or_(
            db.and_(Product.product_type == STANDALONE, Product.record_type == BASE_PRODUCT),
            db.and_(Product.product_type == VARIANT_BASED, Product.record_type == VARIANT),
        )
    )


def get_overview_counts():
    return {
        "users": User.query.count(),
        "products": Product.query.count(),
        "categories": Category.query.count(),
    }


def get_products_by_category():
    rows = (
        db.session.query(Category, db.func.count(Product.id))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.name)
        .all()
    )
    return [
        {
            "id": category.id,
            "name": category.name,
            "product_count": count,
            "created_at": category.created_at.isoformat() if category.created_at else None,
        }
        for category, count in rows
    ]


def get_cart_statistics():
    total_carts = Cart.query.count()
    total_items, total_value = db.session.query(
        db.func.count(CartItem.id),
        db.func.coalesce(db.func.sum(CartItem.price * CartItem.quantity), 0),
    ).one()
    total_value = float(total_value)
    return {
        "total_carts": total_carts,
        "total_cart_items": total_items,
        "total_cart_value": round(total_value, 2),
        "average_cart_value": round(total_value / total_carts, 2) if total_carts else 0,
        "average_items_per_cart": round(total_items / total_carts, 2) if total_carts else 0,
    }


def get_recent_activity():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).limit(10).all()
    products = Product.query.order_by(Product.created_at.desc(), Product.id.desc()).limit(10).all()
    promotions = (
        Promotion.query.order_by(Promotion.created_at.desc(), Promotion.id.desc()).limit(5).all()
    )
    return {"users": users, "products": products, "promotions": promotions}


def get_dashboard_stats(now=None):
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=RECENT_DAYS)

    total_users = User.query.count()
    total_products = Product.query.count()
    total_promotions = Promotion.query.count()
    by_category = get_products_by_category()

    return {
        "overview": {
            "total_users": total_users,
            "total_products": total_products,
            "total_categories": len(by_category),
            "total_promotions": total_promotions,
            "active_promotions": Promotion.query.filter_by(is_active=True).count(),
            "total_carts": Cart.query.count(),
            "total_orders": Order.query.count(),
        },
        "products": {
            "total_products": total_products,
            "recent_products": Product.query.filter(Product.created_at >= since).count(),
            "low_stock_products": _stock_holders()
            .filter(Product.quantity <= LOW_STOCK_THRESHOLD)
            .count(),
            "by_category": [
                {"category_name": c["name"], "product_count": c["product_count"]}
                for c in by_category
            ],
        },
        "users": {
            "total_users": total_users,
            "recent_users": User.query.filter(User.created_at >= since).count(),
        },
        "cart": get_cart_statistics(),
    }
