"""Order routes."""
from flask import g, jsonify
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.auth import admin_required, user_required
from storefront.blueprints.api.payloads import parse
from storefront.blueprints.api.serializers import order_to_dict
from storefront.schemas.cart import OrderCreate
from storefront.services import order_service


@api_bp.route("/orders", methods=["POST"])
@admin_required
def create_order():
    order = order_service.create_order_from_cart(parse(OrderCreate).cart_id)
    return jsonify(order_to_dict(order)), 201


@api_bp.route("/orders", methods=["GET"])
@admin_required
def list_orders():
    return jsonify([order_to_dict(o) for o in order_service.list_orders()])


@api_bp.route("/orders/mine", methods=["GET"])
@user_required
def my_orders():
    return jsonify([order_to_dict(o) for o in order_service.list_orders_for_user(g.user.id)])


@api_bp.route("/orders/<int:order_id>", methods=["GET"])
@admin_required
def get_order(order_id):
    return jsonify(order_to_dict(order_service.get_order(order_id)))
