"""Promotions, news and the about-us text."""
from flask import jsonify, request
from storefront.blueprints.api import api_bp
from storefront.blueprints.api.auth import admin_required, has_admin_token
from storefront.blueprints.api.payloads import parse
from storefront.blueprints.api.serializers import (
    about_us_to_dict,
    news_to_dict,
    promotion_to_dict,
)
from storefront.errors import Forbidden
from storefront.schemas.content import (
    AboutUsUpdate,
    NewsCreate,
    NewsPatch,
    PromotionCreate,
    PromotionPatch,
)
from storefront.services import news_service, promotion_service, settings_service


def _include_inactive():
    wanted = request.args.get("include_inactive", "").lower() in ("1", "true", "yes")
    if wanted and not has_admin_token():
        raise Forbidden("Only admins can list inactive entries")
    return wanted


# Promotions

@api_bp.route("/promotions/active", methods=["GET"])
def active_promotions():
    return jsonify([promotion_to_dict(p) for p in promotion_service.list_active_promotions()])


@api_bp.route("/promotions", methods=["GET"])
def list_promotions():
    promotions = promotion_service.list_promotions(include_inactive=_include_inactive())
    return jsonify([promotion_to_dict(p) for p in promotions])


@api_bp.route("/promotions/<int:promotion_id>", methods=["GET"])
def get_promotion(promotion_id):
    return jsonify(promotion_to_dict(promotion_service.get_promotion(promotion_id)))


@api_bp.route("/promotions", methods=["POST"])
@admin_required
def create_promotion():
    promotion = promotion_service.create_promotion(parse(PromotionCreate).model_dump())
    return jsonify(promotion_to_dict(promotion)), 201


@api_bp.route("/promotions/<int:promotion_id>", methods=["PATCH"])
@admin_required
def update_promotion(promotion_id):
    patch = parse(PromotionPatch).model_dump(exclude_unset=True)
    return jsonify(promotion_to_dict(promotion_service.update_promotion(promotion_id, patch)))


@api_bp.route("/promotions/<int:promotion_id>/toggle-active", methods=["PATCH"])
@admin_required
def toggle_promotion(promotion_id):
    return jsonify(promotion_to_dict(promotion_service.toggle_promotion(promotion_id)))


@api_bp.route("/promotions/<int:promotion_id>", methods=["DELETE"])
@admin_required
def delete_promotion(promotion_id):
    promotion_service.delete_promotion(promotion_id)
    return "", 204


# News

@api_bp.route("/news/active", methods=["GET"])
def active_news():
    return jsonify([news_to_dict(n) for n in news_service.list_active_news()])


@api_bp.route("/news", methods=["GET"])
def list_news():
    return jsonify([news_to_dict(n) for n in news_service.list_news(_include_inactive())])


@api_bp.route("/news/<int:news_id>", methods=["GET"])
def get_news(news_id):
    return jsonify(news_to_dict(news_service.get_news(news_id)))


@api_bp.route("/news", methods=["POST"])
@admin_required
def create_news():
    news = news_service.create_news(parse(NewsCreate).model_dump())
    return jsonify(news_to_dict(news)), 201


@api_bp.route("/news/<int:news_id>", methods=["PATCH"])
@admin_required
def update_news(news_id):
    patch = parse(NewsPatch).model_dump(exclude_unset=True)
    return jsonify(news_to_dict(news_service.update_news(news_id, patch)))


@api_bp.route("/news/<int:news_id>/toggle-active", methods=["PATCH"])
@admin_required
def toggle_news(news_id):
    return jsonify(news_to_dict(news_service.toggle_news(news_id)))


@api_bp.route("/news/<int:news_id>", methods=["DELETE"])
@admin_required
def delete_news(news_id):
    news_service.delete_news(news_id)
    return "", 204


# About us

@api_bp.route("/app-config/about-us", methods=["GET"])
def get_about_us():
    return jsonify(about_us_to_dict(settings_service.get_about_us()))


@api_bp.route("/app-config/about-us", methods=["PATCH"])
@admin_required
def update_about_us():
    row = settings_service.update_about_us(parse(AboutUsUpdate).about_us)
    return jsonify(about_us_to_dict(row))
