"""Catalog routes: base products, variants and their images."""
from flask import jsonify, request
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.auth import admin_required
from storefront.blueprints.api.payloads import parse, request_files
from storefront.blueprints.api.serializers import product_to_dict
from storefront.schemas.product import ProductCreate, ProductPatch, VariantCreate
from storefront.services import product_service


@api_bp.route("/products", methods=["GET"])
def list_products():
    """Base products with optional filters."""
    sold_out = request.args.get("sold_out")
    pagination = product_service.list_products(
        category_id=request.args.get("category_id", type=int),
        product_type=(request.args.get("product_type") or "").upper() or None,
        sold_out=None if sold_out is None else sold_out.lower() in ("1", "true", "yes"),
        page=request.args.get("page", 1, type=int),
        per_page=min(request.args.get("per_page", 24, type=int), 100),
    )
    return jsonify(
        {
            "items": [product_to_dict(p) for p in pagination.items],
            "page": pagination.page,
            "pages": pagination.pages,
            "total": pagination.total,
        }
    )


@api_bp.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id):
    product = product_service.get_product(product_id)
    return jsonify(product_to_dict(product, include_variants=True))


@api_bp.route("/products/<int:product_id>/variants", methods=["GET"])
def list_variants(product_id):
    variants = product_service.get_variants(product_id)
    return jsonify([product_to_dict(v) for v in variants])


@api_bp.route("/products", methods=["POST"])
@admin_required
def create_product():
    data = parse(ProductCreate).model_dump()
    product = product_service.create_base(data, request_files())
    return jsonify(product_to_dict(product)), 201


@api_bp.route("/products/<int:product_id>/variants", methods=["POST"])
@admin_required
def create_variant(product_id):
    data = parse(VariantCreate).model_dump()
    variant = product_service.create_variant(product_id, data, request_files())
    return jsonify(product_to_dict(variant)), 201


@api_bp.route("/products/<int:product_id>", methods=["PATCH"])
@admin_required
def update_product(product_id):
    patch = parse(ProductPatch).model_dump(exclude_unset=True)
    product = product_service.update(product_id, patch, request_files())
    return jsonify(product_to_dict(product))


@api_bp.route("/products/<int:product_id>", methods=["DELETE"])
@admin_required
def delete_product(product_id):
    product_service.remove(product_id)
    return "", 204
