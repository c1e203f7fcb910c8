"""Flask CLI commands for admin operations."""
import click


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        from babyshop.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo products with colors, sizes and variations (idempotent)."""
        from decimal import Decimal
        from babyshop.extensions import db
        from babyshop.models.product import Product
        from babyshop.services.attributes_form import AttributesForm

        if Product.query.first():
            click.echo("Products already exist, skipping demo seed.")
            return

        demo_products = [
            ("cotton-romper", "Cotton Romper", "সুতির রম্পার", "850", [("Sky Blue", "#87CEEB"), ("Peach", "#FFDAB9")], "age"),
            ("soft-sole-booties", "Soft Sole Booties", "নরম সোলের জুতা", "650", [("White", "#FFF")], "shoes"),
            ("muslin-swaddle", "Muslin Swaddle Blanket", "মসলিন কাঁথা", "1200", [("Mint", "#98FF98"), ("Lavender", "#E6E6FA")], None),
            ("baby-feeding-bottle", "Anti-colic Feeding Bottle", "ফিডিং বোতল", "450", [], None),
        ]
        for slug, name, name_bn, price, colors, scale in demo_products:
            product = Product(
                slug=slug,
                name=name,
                name_bn=name_bn,
                price=Decimal(price),
                status="PUBLISHED",
            )
            db.session.add(product)
            db.session.commit()

            form = AttributesForm(product)
            form.load()
            for color_name, hex_code in colors:
                form.add_color(color_name, hex_code)
            if scale:
                form.add_common_sizes(scale)
            form.generate_all_variations()
            for variation in form.variations:
                variation.stock = 10
            if not form.save():
                raise click.ClickException(f"Failed to seed {slug}: {form.error}")
            click.echo(f"Seeded {slug}: {len(form.variations)} variations")

    @app.cli.command("create-admin")
    @click.argument("email")
    def create_admin(email):
        """Grant admin access to an email address."""
        from babyshop.extensions import db
        from babyshop.models.admin_user import AdminUser

        email = email.strip().lower()
        user = AdminUser.query.filter_by(email=email).first()
        if user is None:
            user = AdminUser(email=email)
            db.session.add(user)
        user.is_admin = True
        db.session.commit()
        click.echo(f"{email} is now an admin.")

    @app.cli.command("attribute-stats")
    @click.argument("product_id", type=int)
    def attribute_stats(product_id):
        """Show color, size and variation counts for a product."""
        from babyshop.services.attribute_service import get_attribute_stats

        s = get_attribute_stats(product_id)
        click.echo(f"Colors: {s['color_count']}")
        click.echo(f"Sizes: {s['size_count']}")
        click.echo(f"Variations: {s['variation_count']}")
