"""Cart routes for the calling user, plus admin read paths."""
from flask import g, jsonify
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.auth import admin_required, user_required
from storefront.blueprints.api.payloads import parse
from storefront.blueprints.api.serializers import cart_item_to_dict, cart_to_dict
from storefront.schemas.cart import AddToCart, CartItemUpdate
from storefront.services import cart_service


@api_bp.route("/cart", methods=["GET"])
@user_required
def get_cart():
    return jsonify(cart_to_dict(cart_service.get_or_create_cart(g.user.id)))


@api_bp.route("/cart/items", methods=["POST"])
@user_required
def add_to_cart():
    """Add a variant, or a standalone product with a size (and color)."""
    payload = parse(AddToCart)
    item = cart_service.add_to_cart(
        g.user.id,
        payload.product_id,
        payload.quantity,
        size=payload.size,
        color=payload.color,
    )
    return jsonify(cart_item_to_dict(item)), 201


@api_bp.route("/cart/items/<int:item_id>", methods=["PATCH"])
@user_required
def update_cart_item(item_id):
    payload = parse(CartItemUpdate)
    item = cart_service.update_cart_item(g.user.id, item_id, payload.quantity)
    return jsonify(cart_item_to_dict(item))


@api_bp.route("/cart/items/<int:item_id>", methods=["DELETE"])
@user_required
def remove_from_cart(item_id):
    cart_service.remove_from_cart(g.user.id, item_id)
    return "", 204


@api_bp.route("/cart/clear", methods=["DELETE"])
@user_required
def clear_cart():
    removed = cart_service.clear_cart(g.user.id)
    return jsonify({"removed": removed})


@api_bp.route("/admin/carts", methods=["GET"])
@admin_required
def list_carts():
    return jsonify([cart_to_dict(c) for c in cart_service.get_all_carts()])


@api_bp.route("/admin/carts/<int:cart_id>", methods=["GET"])
@admin_required
def get_cart_by_id(cart_id):
    return jsonify(cart_to_dict(cart_service.get_cart_by_id(cart_id)))
