from datetime import datetime, timezone
from storefront.extensions import db


class Cart(db.Model):
    __tablename__ = "carts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = db.relationship("User", backref=db.backref("cart", uselist=False))
    items = db.relationship(
        "CartItem",
        backref="cart",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    @property
    def total(self):
        return sum(item.line_total for item in self.items)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    def __repr__(self):
        return f"<Cart {self.id} user={self.user_id}>"


class CartItem(db.Model):
    __tablename__ = "cart_items"

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(
        db.Integer,
        db.ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    size = db.Column(db.String(50))
    quantity = db.Column(db.Integer, nullable=False, default=1)
    # Snapshot taken when the line is first added
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("cart_id", "product_id", "size", name="uq_cart_line"),
    )

    product = db.relationship(
        "Product",
        backref=db.backref(
            "cart_items", lazy="select", cascade="all, delete-orphan"
        ),
    )

    @property
    def line_total(self):
        return (self.price or 0) * self.quantity

    def __repr__(self):
        return f"<CartItem product={self.product_id} size={self.size} x{self.quantity}>"
