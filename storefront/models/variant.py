from storefront.extensions import db


class ProductSize(db.Model):
    __tablename__ = "product_sizes"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    size = db.Column(db.String(50), nullable=False)
    price = db.Column(db.Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("product_id", "size", name="uq_product_size"),
    )

    def __repr__(self):
        return f"<ProductSize {self.size}: {self.price}>"


class ProductColor(db.Model):
    __tablename__ = "product_colors"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    color = db.Column(db.String(50), nullable=False)

    __table_args__ = (
        db.UniqueConstraint("product_id", "color", name="uq_product_color"),
    )

    def __repr__(self):
        return f"<ProductColor {self.color}>"
