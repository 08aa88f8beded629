"""Flask CLI commands for admin operations."""
import click
from flask import current_app

DEMO_LOCATIONS = [
    ("Main warehouse", "MAIN", 20),
    ("Downtown store", "DT01", 5),
]

DEMO_PRODUCT = {
    "name": "Classic Cotton Tee",
    "tags": ["cotton", "basics"],
    "attributes": [
        {"name": "Color", "values": ["Red", "Blue"]},
        {"name": "Size", "values": ["S", "M", "L"]},
    ],
    "defaults": {"price": 19.99, "sku": "TEE", "tracked": True},
}


def _parse_attribute_option(raw):
    """Turn ``"Color=Red,Blue"`` into an attribute payload."""
    if "=" not in raw:
        raise click.BadParameter(f"expected NAME=value1,value2, got '{raw}'")
    name, values = raw.split("=", 1)
    return {
        "name": name.strip(),
        "values": [v.strip() for v in values.split(",") if v.strip()],
    }


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and seed the default location."""
        from backoffice.extensions import db
        from backoffice.models.location import Location

        db.create_all()

        if not Location.query.first():
            db.session.add(
                Location(
                    name=current_app.config["DEFAULT_LOCATION_NAME"],
                    code="MAIN",
                    default_location=True,
                )
            )
            db.session.commit()

        click.echo("Database initialized with default location.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo locations and a demo product (idempotent)."""
        from backoffice.models.location import Location
        from backoffice.models.product import Product
        from backoffice.services import inventory_service, product_service, variant_service

        if Product.query.filter_by(name=DEMO_PRODUCT["name"]).first():
            click.echo("Demo product already exists, skipping demo seed.")
            return

        stock = {}
        for name, code, quantity in DEMO_LOCATIONS:
            location = Location.query.filter_by(code=code).first()
            if not location:
                location = product_service.create_location(
                    name, code, default_location=code == "MAIN"
                )
            if location.is_active:
                stock[location.id] = quantity

        attributes = variant_service.normalize_attributes(DEMO_PRODUCT["attributes"])
        allocation = inventory_service.initial_allocation()
        variants = variant_service.regenerate_variants(
            attributes, [], defaults=DEMO_PRODUCT["defaults"], allocation=allocation
        )
        for location_id, quantity in stock.items():
            variants = allocation.set_location_quantity(location_id, quantity, variants)

        product = product_service.create_product(
            dict(
                DEMO_PRODUCT,
                attributes=attributes,
                variants=variants,
                inventory_quantities=allocation.template(),
            )
        )
        click.echo(f"Seeded demo product {product.id} with {len(product.variants)} variant(s).")

    @app.cli.command("add-location")
    @click.argument("name")
    @click.option("--code", required=True)
    @click.option("--default", "is_default", is_flag=True)
    def add_location(name, code, is_default):
        """Create a stock location."""
        from backoffice.services import product_service

        try:
            location = product_service.create_location(name, code, default_location=is_default)
        except ValueError as e:
            raise click.ClickException(str(e))
        click.echo(f"Created location {location.id}: {location.name} ({location.code})")

    @app.cli.command("variants")
    @click.option(
        "-a", "--attribute", "attributes", multiple=True,
        help='Attribute as NAME=value1,value2 (repeatable, max 3)',
    )
    def variants(attributes):
        """Preview the variant matrix for a set of attributes."""
        from backoffice.services import variant_service

        parsed = [_parse_attribute_option(raw) for raw in attributes]
        limit = current_app.config["MAX_ATTRIBUTES"]
        if len(parsed) > limit:
            raise click.ClickException(f"At most {limit} attributes are allowed")

        attrs = variant_service.normalize_attributes(parsed)
        combinations = variant_service.generate_combinations(attrs)
        if not combinations:
            click.echo(f"No attributes: product gets a single '{variant_service.DEFAULT_TITLE}' variant.")
            return
        for i, combination in enumerate(combinations, start=1):
            click.echo(f"{i:>3}. {combination['title']}")
        click.echo(f"Total variants: {len(combinations)}")

    @app.cli.command("stats")
    def stats():
        """Show product statistics."""
        from backoffice.services.product_service import get_stats

        s = get_stats()
        total = sum(s.values())
        click.echo(f"Total products: {total}")
        for status, count in sorted(s.items()):
            click.echo(f"  {status}: {count}")
