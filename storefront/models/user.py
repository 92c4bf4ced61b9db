from datetime import datetime, timezone
from storefront.extensions import db


class User(db.Model):
    """Cart/order owner. Credentials live with the upstream auth layer."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True)
    mobile_number = db.Column(db.String(32), unique=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<User {self.id} {self.email or self.mobile_number}>"
