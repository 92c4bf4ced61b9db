from datetime import datetime, timezone
from storefront.extensions import db

STANDALONE = "STANDALONE"
VARIANT_BASED = "VARIANT_BASED"

BASE_PRODUCT = "BASE_PRODUCT"
VARIANT = "VARIANT"


class Product(db.Model):
    """One table, three roles: standalone base, variant-group base, variant.

    Which role a row plays is decided by ``product_type`` + ``record_type``;
    the legal pairings live in ``services.product_type_service``.
    """

    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    note = db.Column(db.Text)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    price = db.Column(db.Numeric(10, 2, asdecimal=False))  # variants only
    size = db.Column(db.String(50))
    color = db.Column(db.String(50))
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )
    product_type = db.Column(
        db.String(20), nullable=False, default=STANDALONE, index=True
    )
    record_type = db.Column(
        db.String(20), nullable=False, default=BASE_PRODUCT, index=True
    )
    parent_product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    # "<size>|<color>" for lazily materialized standalone variants
    variant_key = db.Column(db.String(120))
    sold_out = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "parent_product_id", "variant_key", name="uq_product_variant_key"
        ),
    )

    # Relationships
    category = db.relationship("Category", back_populates="products")
    sizes = db.relationship(
        "ProductSize",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductSize.size",
    )
    colors = db.relationship(
        "ProductColor",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductColor.id",
    )
    images = db.relationship(
        "ProductImage",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ProductImage.sort_order",
    )
    variants = db.relationship(
        "Product",
        backref=db.backref("parent", remote_side=[id]),
        lazy="select",
        cascade="all, delete-orphan",
        order_by="Product.id",
    )

    PRODUCT_TYPES = {STANDALONE, VARIANT_BASED}
    RECORD_TYPES = {BASE_PRODUCT, VARIANT}

    @staticmethod
    def make_variant_key(size, color=None):
        return f"{size}|{color or ''}"

    @property
    def is_variant(self):
        return self.record_type == VARIANT

    @property
    def is_base(self):
        return self.record_type == BASE_PRODUCT

    @property
    def is_standalone(self):
        return self.product_type == STANDALONE

    def find_size(self, size):
        return next((s for s in self.sizes if s.size == size), None)

    @property
    def first_image(self):
        return self.images[0] if self.images else None

    def __repr__(self):
        return f"<Product {self.id} {self.product_type}/{self.record_type}: {self.title}>"
