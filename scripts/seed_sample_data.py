#!/usr/bin/env python3
"""Seed sample baby products with attributes for local development."""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from decimal import Decimal

from babyshop import create_app
from babyshop.extensions import db
from babyshop.models.product import Product
from babyshop.services.attributes_form import AttributesForm

app = create_app()

SAMPLE_PRODUCTS = [
    {
        "slug": "organic-cotton-onesie",
        "name": "Organic Cotton Onesie",
        "name_bn": "অর্গানিক সুতির ওয়ানসি",
        "price": "950",
        "colors": [("White", "#FFFFFF"), ("Butter Yellow", "#FFF3B0")],
        "sizes": ("age", ["Newborn", "0-3M", "3-6M"]),
    },
    {
        "slug": "knit-baby-cap",
        "name": "Knit Baby Cap",
        "name_bn": "উলের শিশু টুপি",
        "price": "350",
        "colors": [("Red", "#FF0000"), ("Navy", "#000080"), ("Grey", "#888")],
        "sizes": None,
    },
    {
        "slug": "first-walker-shoes",
        "name": "First Walker Shoes",
        "name_bn": "প্রথম হাঁটার জুতা",
        "price": "1450",
        "colors": [],
        "sizes": ("shoes", ["5", "6", "7"]),
    },
    {
        "slug": "bamboo-bath-towel",
        "name": "Bamboo Hooded Bath Towel",
        "name_bn": "বাঁশের তোয়ালে",
        "price": "1100",
        "colors": [],
        "sizes": None,
    },
]


def seed():
    with app.app_context():
        if Product.query.first():
            print("Products already exist, skipping seed.")
            return

        for item in SAMPLE_PRODUCTS:
            product = Product(
                slug=item["slug"],
                name=item["name"],
                name_bn=item["name_bn"],
                price=Decimal(item["price"]),
                status="PUBLISHED",
            )
            db.session.add(product)
            db.session.commit()

            form = AttributesForm(product)
            form.load()
            for name, hex_code in item["colors"]:
                form.add_color(name, hex_code)
            if item["sizes"]:
                scale, names = item["sizes"]
                for name in names:
                    form.add_size(name, scale)
            form.generate_all_variations()
            for i, variation in enumerate(form.variations):
                # Leave one combination out of stock to exercise option disabling
                variation.stock = 0 if i == 1 else 12

            if not form.save():
                print(f"  Failed {item['slug']}: {form.error}")
                continue
            print(f"  Created {item['slug']}: {len(form.variations)} variations")

        print(f"\nSeeded {len(SAMPLE_PRODUCTS)} products.")


if __name__ == "__main__":
    seed()
