"""Admin dashboard and user listing."""
from flask import jsonify
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.auth import admin_required
from storefront.blueprints.api.serializers import (
    product_summary,
    promotion_to_dict,
    user_to_dict,
)
from storefront.services import dashboard_service, user_service


@api_bp.route("/admin/dashboard/stats", methods=["GET"])
@admin_required
def dashboard_stats():
    return jsonify(dashboard_service.get_dashboard_stats())


@api_bp.route("/admin/dashboard/overview", methods=["GET"])
@admin_required
def dashboard_overview():
    return jsonify(dashboard_service.get_overview_counts())


@api_bp.route("/admin/dashboard/products/by-category", methods=["GET"])
@admin_required
def dashboard_products_by_category():
    return jsonify(dashboard_service.get_products_by_category())


@api_bp.route("/admin/dashboard/recent-activity", methods=["GET"])
@admin_required
def dashboard_recent_activity():
    activity = dashboard_service.get_recent_activity()
    return jsonify(
        {
            "users": [user_to_dict(u) for u in activity["users"]],
            "products": [product_summary(p) for p in activity["products"]],
            "promotions": [promotion_to_dict(p) for p in activity["promotions"]],
        }
    )


@api_bp.route("/admin/dashboard/cart-statistics", methods=["GET"])
@admin_required
def dashboard_cart_statistics():
    return jsonify(dashboard_service.get_cart_statistics())


@api_bp.route("/admin/users", methods=["GET"])
@admin_required
def list_users():
    return jsonify([user_to_dict(u) for u in user_service.list_users()])
