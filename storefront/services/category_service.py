import logging

from sqlalchemy.exc import IntegrityError

from storefront.errors import Conflict, NotFound, ValidationError
from storefront.extensions import db
from storefront.models.category import Category

logger = logging.getLogger(__name__)


def create_category(name):
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    if Category.query.filter_by(name=name).first():
        raise Conflict(f'Category "{name}" already exists')

    category = Category(name=name)
    db.session.add(category)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict(f'Category "{name}" already exists')
    logger.info("Created category %d: %s", category.id, name)
    return category


def list_categories():
    return Category.query.order_by(Category.name).all()


def get_category(category_id):
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFound(f"Category with ID {category_id} not found")
    return category


def delete_category(category_id):
    category = get_category(category_id)
    in_use = category.products.count()
    if in_use:
        raise Conflict(
            f"Category {category_id} is used by {in_use} products. Move or delete them first."
        )
    db.session.delete(category)
    db.session.commit()
    logger.info("Deleted category %d", category_id)
