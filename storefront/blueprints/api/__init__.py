from flask import Blueprint

api_bp = Blueprint("api", __name__)

from storefront.blueprints.api import (  # noqa: F401, E402
    cart,
    categories,
    content,
    dashboard,
    orders,
    products,
)
