from datetime import datetime, timedelta, timezone

import pytest

from storefront.models.category import Category
from storefront.services import cart_service, dashboard_service, promotion_service


def test_empty_store(db):
    stats = dashboard_service.get_dashboard_stats()
    assert stats["overview"]["total_products"] == 0
    assert stats["cart"] == {
        "total_carts": 0,
        "total_cart_items": 0,
        "total_cart_value": 0,
        "average_cart_value": 0,
        "average_items_per_cart": 0,
    }


def test_low_stock_counts_stock_holders_only(make_standalone, make_variant_family):
    make_standalone(quantity=50)
    make_standalone(title="Cap", name="cap", quantity=3)
    # The base row of a variant family holds no stock and is not counted.
    make_variant_family(variants=(("9", 2, 50), ("10", 40, 50)))

    stats = dashboard_service.get_dashboard_stats()
    assert stats["products"]["low_stock_products"] == 2
    assert stats["products"]["total_products"] == 5


def test_products_by_category(category, make_standalone, db):
    empty = Category(name="Bags")
    db.session.add(empty)
    db.session.commit()
    make_standalone()

    rows = dashboard_service.get_products_by_category()
    assert [(r["name"], r["product_count"]) for r in rows] == [("Apparel", 1), ("Bags", 0)]


def test_cart_statistics(user, other_user, make_standalone):
    shirt = make_standalone(quantity=10)
    cart_service.add_to_cart(user.id, shirt.id, 2, size="M")
    cart_service.add_to_cart(user.id, shirt.id, 1, size="S")
    cart_service.get_or_create_cart(other_user.id)

    stats = dashboard_service.get_cart_statistics()
    assert stats["total_carts"] == 2
    assert stats["total_cart_items"] == 2
    assert stats["total_cart_value"] == pytest.approx(70)
    assert stats["average_cart_value"] == pytest.approx(35)
    assert stats["average_items_per_cart"] == pytest.approx(1)


def test_overview_and_recent_activity(user, make_standalone):
    make_standalone()
    now = datetime.now(timezone.utc)
    promotion_service.create_promotion(
        {
            "title": "Sale",
            "image_url": "https://cdn.example.test/sale.jpg",
            "appearance_date": now,
            "close_date": now + timedelta(days=1),
        }
    )

    assert dashboard_service.get_overview_counts() == {
        "users": 1,
        "products": 1,
        "categories": 1,
    }

    activity = dashboard_service.get_recent_activity()
    assert [u.id for u in activity["users"]] == [user.id]
    assert [p.title for p in activity["products"]] == ["Shirt"]
    assert [p.title for p in activity["promotions"]] == ["Sale"]

    stats = dashboard_service.get_dashboard_stats()
    assert stats["overview"]["active_promotions"] == 1
    assert stats["users"]["recent_users"] == 1
    assert stats["products"]["recent_products"] == 1
