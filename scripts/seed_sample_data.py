#!/usr/bin/env python3
"""Seed sample locations and products for local development."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backoffice import create_app
from backoffice.extensions import db
from backoffice.models.location import Location
from backoffice.models.product import Product
from backoffice.services import inventory_service, product_service, variant_service

app = create_app()

SAMPLE_LOCATIONS = [
    ("Main warehouse", "MAIN", 40),
    ("Downtown store", "DT01", 10),
    ("Airport kiosk", "AP01", 0),
]

SAMPLE_PRODUCTS = [
    {
        "name": "Classic Cotton Tee",
        "tags": ["cotton", "basics"],
        "attributes": [
            ("Color", ["Red", "Blue", "Black"]),
            ("Size", ["S", "M", "L", "XL"]),
        ],
        "defaults": {"sku": "TEE", "price": 19.99, "tracked": True, "weight": 180},
    },
    {
        "name": "Canvas Tote Bag",
        "tags": ["accessory"],
        "attributes": [("Color", ["Natural", "Navy"])],
        "defaults": {"sku": "TOTE", "price": 24.0, "tracked": True},
    },
    {
        "name": "Merino Beanie",
        "tags": ["wool", "winter"],
        "attributes": [
            ("Color", ["Grey", "Forest"]),
            ("Size", ["S/M", "L/XL"]),
            ("Cuff", ["Folded", "Slouch"]),
        ],
        "defaults": {"sku": "BEANIE", "price": 32.0, "tracked": True},
    },
    {
        "name": "Gift Card",
        "tags": ["digital"],
        "attributes": [],
        "defaults": {"price": 50.0, "requires_shipping": False},
    },
]


def seed():
    with app.app_context():
        if Product.query.first():
            print("Products already exist, skipping seed.")
            return

        stock = {}
        for name, code, quantity in SAMPLE_LOCATIONS:
            location = Location.query.filter_by(code=code).first()
            if not location:
                location = product_service.create_location(
                    name, code, default_location=code == "MAIN"
                )
            stock[location.id] = quantity

        for item in SAMPLE_PRODUCTS:
            attributes = variant_service.normalize_attributes(
                [{"name": n, "values": v} for n, v in item["attributes"]]
            )
            allocation = inventory_service.initial_allocation()
            variants = variant_service.regenerate_variants(
                attributes, [], defaults=item["defaults"], allocation=allocation
            )
            for location_id, quantity in stock.items():
                variants = allocation.set_location_quantity(location_id, quantity, variants)

            product = product_service.create_product(
                {
                    "name": item["name"],
                    "tags": item["tags"],
                    "attributes": attributes,
                    "variants": variants,
                    "defaults": item["defaults"],
                    "inventory_quantities": allocation.template(),
                }
            )
            print(f"  Created {product.id}: {product.name} ({len(product.variants)} variants)")

        db.session.commit()
        print(f"\nSeeded {len(SAMPLE_PRODUCTS)} products.")


if __name__ == "__main__":
    seed()
