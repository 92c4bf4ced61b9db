from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError
from storefront.extensions import db

ABOUT_US = "about_us"


class Settings(db.Model):
    """Key/value store for shop-wide texts such as the about-us page."""

    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @staticmethod
    def get_row(key):
        """Return the row for ``key``, creating an empty one on first read."""
        row = db.session.get(Settings, key)
        if row is None:
            row = Settings(key=key, value=None)
            db.session.add(row)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                row = db.session.get(Settings, key)
                if row is None:
                    raise
        return row

    @staticmethod
    def set(key, value):
        row = db.session.get(Settings, key)
        if row:
            row.value = value
        else:
            row = Settings(key=key, value=value)
            db.session.add(row)
        db.session.commit()
        return row

    def __repr__(self):
        return f"<Settings {self.key}>"
