from datetime import datetime, timezone
from storefront.extensions import db


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    cart_id = db.Column(
        db.Integer,
        db.ForeignKey("carts.id", ondelete="SET NULL"),
        nullable=True,
    )
    total_amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    user = db.relationship("User", backref=db.backref("orders", lazy="dynamic"))
    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    STATUSES = {"pending", "confirmed", "shipped", "delivered", "cancelled"}

    def __repr__(self):
        return f"<Order {self.id} [{self.status}] {self.total_amount}>"


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer,
        db.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    size = db.Column(db.String(50))
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False)

    product = db.relationship(
        "Product", backref=db.backref("order_items", lazy="select")
    )

    def __repr__(self):
        return f"<OrderItem {self.title} x{self.quantity}>"
