"""Tests for the Flask CLI commands."""
from backoffice.models.inventory import InventoryLevel
from backoffice.models.product import Product


def test_seed_demo_creates_variant_matrix(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0, result.output

    product = Product.query.filter_by(name="Classic Cotton Tee").one()
    assert [v.title for v in product.variants] == [
        "Red / S", "Red / M", "Red / L", "Blue / S", "Blue / M", "Blue / L",
    ]
    assert [a.name for a in product.attributes] == ["Color", "Size"]
    assert all(v.to_dict()["price"] == 19.99 for v in product.variants)

    for variant in product.variants:
        levels = InventoryLevel.query.filter_by(variant_id=variant.id).all()
        assert sum(level.available for level in levels) == 25

    again = runner.invoke(args=["seed-demo"])
    assert "skipping" in again.output
    assert Product.query.filter_by(name="Classic Cotton Tee").count() == 1


def test_variants_preview(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["variants", "-a", "Color=Red,Blue", "-a", "Size=S,M"])
    assert result.exit_code == 0
    assert "Red / S" in result.output
    assert "Total variants: 4" in result.output


def test_variants_preview_without_attributes(app):
    result = app.test_cli_runner().invoke(args=["variants"])
    assert "Default Title" in result.output
