"""Category routes."""
from flask import jsonify
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.auth import admin_required
from storefront.blueprints.api.payloads import parse
from storefront.blueprints.api.serializers import category_to_dict
from storefront.schemas.product import CategoryCreate
from storefront.services import category_service


@api_bp.route("/categories", methods=["GET"])
def list_categories():
    return jsonify([category_to_dict(c) for c in category_service.list_categories()])


@api_bp.route("/categories", methods=["POST"])
@admin_required
def create_category():
    category = category_service.create_category(parse(CategoryCreate).name)
    return jsonify(category_to_dict(category)), 201


@api_bp.route("/categories/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id):
    category_service.delete_category(category_id)
    return "", 204
