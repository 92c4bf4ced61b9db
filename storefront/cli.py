"""Flask CLI commands for admin operations."""
import click


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        from storefront.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("create-category")
    @click.argument("name")
    def create_category(name):
        """Create a product category."""
        from storefront.services.category_service import create_category as _create

        category = _create(name)
        click.echo(f"Created category {category.id}: {category.name}")

    @app.cli.command("create-user")
    @click.option("--email", default=None)
    @click.option("--mobile", default=None)
    def create_user(email, mobile):
        """Register a cart/order owner (credentials live upstream)."""
        from storefront.extensions import db
        from storefront.models.user import User

        if not email and not mobile:
            raise click.UsageError("Pass --email or --mobile")
        user = User(email=email, mobile_number=mobile)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created user {user.id}")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed a demo catalog (idempotent)."""
        from storefront.models.category import Category
        from storefront.models.product import Product
        from storefront.services import category_service, product_service

        if Product.query.first():
            click.echo("Products already exist, skipping demo seed.")
            return

        apparel = Category.query.filter_by(name="Apparel").first()
        if apparel is None:
            apparel = category_service.create_category("Apparel")
        footwear = Category.query.filter_by(name="Footwear").first()
        if footwear is None:
            footwear = category_service.create_category("Footwear")

        shirt = product_service.create_base(
            {
                "title": "Shirt",
                "name": "shirt",
                "description": "Cotton shirt",
                "quantity": 50,
                "category_id": apparel.id,
                "product_type": "STANDALONE",
                "sizes": [
                    {"size": "S", "price": 20},
                    {"size": "M", "price": 25},
                    {"size": "L", "price": 27},
                ],
                "colors": [{"color": "White"}, {"color": "Blue"}],
            }
        )
        shoe = product_service.create_base(
            {
                "title": "Shoe",
                "name": "shoe",
                "description": "Running shoe",
                "quantity": 0,
                "category_id": footwear.id,
                "product_type": "VARIANT_BASED",
            }
        )
        for size, qty in (("9", 3), ("10", 5)):
            product_service.create_variant(
                shoe.id,
                {
                    "title": f"Shoe - {size}",
                    "name": f"shoe-{size}",
                    "quantity": qty,
                    "size": size,
                    "price": 50,
                },
            )
        click.echo(f"Seeded demo products: {shirt.title} ({shirt.id}), {shoe.title} ({shoe.id}).")

    @app.cli.command("stats")
    def stats():
        """Show catalog, cart and order statistics."""
        from storefront.models.cart import Cart
        from storefront.models.order import Order
        from storefront.services.product_service import get_stats

        s = get_stats()
        total = sum(s.values())
        click.echo(f"Total products: {total}")
        for (product_type, record_type), count in sorted(s.items()):
            click.echo(f"  {product_type}/{record_type}: {count}")
        click.echo(f"Carts: {Cart.query.count()}")
        click.echo(f"Orders: {Order.query.count()}")
