"""Caller identification for API routes.

Customer identity comes from the upstream auth layer in ``X-User-Id``;
admin routes need ``X-Admin-Token`` matching ADMIN_API_TOKEN.
"""
import hmac
import logging
from functools import wraps

from flask import current_app, g, request

from storefront.errors import Forbidden, Unauthorized
from storefront.extensions import db
from storefront.models.user import User

logger = logging.getLogger(__name__)


def has_admin_token():
    expected = current_app.config["ADMIN_API_TOKEN"]
    token = request.headers.get("X-Admin-Token", "")
    return bool(expected) and hmac.compare_digest(token, expected)


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not has_admin_token():
            logger.warning("Rejected admin request to %s", request.path)
            raise Forbidden("Admin token missing or invalid")
        return view(*args, **kwargs)

    return wrapper


def user_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        raw = request.headers.get("X-User-Id", "")
        try:
            user_id = int(raw)
        except ValueError:
            raise Unauthorized("X-User-Id header missing or malformed")
        user = db.session.get(User, user_id)
        if user is None:
            raise Unauthorized(f"Unknown user {user_id}")
        g.user = user
        return view(*args, **kwargs)

    return wrapper
