from storefront.models.user import User


def list_users():
    return User.query.order_by(User.created_at.desc(), User.id.desc()).all()
