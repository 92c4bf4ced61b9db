import logging
from datetime import datetime, timezone

from storefront.errors import NotFound, ValidationError
from storefront.extensions import db
from storefront.models.promotion import Promotion

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "image_url", "description", "appearance_date", "close_date")


def _as_utc(value):
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _check_window(appearance_date, close_date):
    if _as_utc(close_date) <= _as_utc(appearance_date):
        raise ValidationError("Close date must be after appearance date")


def create_promotion(data):
    _check_window(data["appearance_date"], data["close_date"])
    promotion = Promotion(
        title=data["title"],
        image_url=data["image_url"],
        description=data.get("description"),
        appearance_date=_as_utc(data["appearance_date"]),
        close_date=_as_utc(data["close_date"]),
    )
    db.session.add(promotion)
    db.session.commit()
    logger.info("Created promotion %d: %s", promotion.id, promotion.title)
    return promotion


def list_promotions(include_inactive=False):
    query = Promotion.query
    if not include_inactive:
        query = query.filter_by(is_active=True)
    return query.order_by(Promotion.created_at.desc(), Promotion.id.desc()).all()


def list_active_promotions(now=None):
    """Active promotions whose date window contains ``now``."""
    now = _as_utc(now or datetime.now(timezone.utc))
    return (
        Promotion.query.filter(
            Promotion.is_active.is_(True),
            Promotion.appearance_date <= now,
            Promotion.close_date >= now,
        )
        .order_by(Promotion.created_at.desc(), Promotion.id.desc())
        .all()
    )


def get_promotion(promotion_id):
    promotion = db.session.get(Promotion, promotion_id)
    if promotion is None:
        raise NotFound(f"Promotion with ID {promotion_id} not found")
    return promotion


def update_promotion(promotion_id, patch):
    promotion = get_promotion(promotion_id)
    _check_window(
        patch.get("appearance_date") or promotion.appearance_date,
        patch.get("close_date") or promotion.close_date,
    )
    for field in UPDATABLE_FIELDS:
        if field in patch:
            value = patch[field]
            if field.endswith("_date"):
                value = _as_utc(value)
            setattr(promotion, field, value)
    db.session.commit()
    logger.info("Updated promotion %d (fields=%s)", promotion.id, sorted(patch))
    return promotion


def delete_promotion(promotion_id):
    promotion = get_promotion(promotion_id)
    db.session.delete(promotion)
    db.session.commit()
    logger.info("Deleted promotion %d", promotion_id)


def toggle_promotion(promotion_id):
    promotion = get_promotion(promotion_id)
    promotion.is_active = not promotion.is_active
    db.session.commit()
    logger.info("Promotion %d is_active=%s", promotion.id, promotion.is_active)
    return promotion
