from datetime import datetime, timezone
from storefront.extensions import db


class Promotion(db.Model):
    """Banner shown between ``appearance_date`` and ``close_date``."""

    __tablename__ = "promotions"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    image_url = db.Column(db.String(1024), nullable=False)
    description = db.Column(db.Text)
    appearance_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    close_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<Promotion {self.id} {self.title} active={self.is_active}>"
