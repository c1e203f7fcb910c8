"""Tests for database models."""
from decimal import Decimal

from babyshop.models.admin_user import AdminUser
from babyshop.models.attributes import ProductColor
from babyshop.models.product import Product
from babyshop.models.variation import ProductVariation, ProductVariationImage


def test_product_creation(db):
    p = Product(slug="test-bib", name="Test Bib", price=Decimal("199.00"), status="DRAFT")
    db.session.add(p)
    db.session.commit()

    assert p.id is not None
    assert p.price == Decimal("199.00")
    assert not p.is_visible

    p.status = "PUBLISHED"
    assert p.is_visible


def test_product_bangla_name(db):
    p = Product(slug="bib", name="Bib", name_bn="বিব", price=Decimal("10"))
    assert p.display_name("bn") == "বিব"
    assert p.display_name("en") == "Bib"
    assert Product(slug="x", name="X", price=Decimal("1")).display_name("bn") == "X"


def test_variation_images_ordered(db, product):
    color = ProductColor(product_id=product.id, name="Red", hex_code="#F00")
    db.session.add(color)
    db.session.flush()
    variation = ProductVariation(
        product_id=product.id, color_id=color.id, price=Decimal("850"), stock=2
    )
    db.session.add(variation)
    db.session.flush()
    for order in (2, 0, 1):
        db.session.add(
            ProductVariationImage(
                variation_id=variation.id,
                image_url=f"https://cdn.example.test/{order}.jpg",
                display_order=order,
            )
        )
    db.session.commit()
    db.session.expire_all()

    variation = db.session.get(ProductVariation, variation.id)
    assert [img.display_order for img in variation.images] == [0, 1, 2]
    assert variation.color.name == "Red"
    assert variation.in_stock


def test_effective_price():
    v = ProductVariation(price=Decimal("500"), sale_price=None, stock=0)
    assert v.effective_price == Decimal("500")
    v.sale_price = Decimal("450")
    assert v.effective_price == Decimal("450")
    v.sale_price = Decimal("600")
    assert v.effective_price == Decimal("500")


def test_admin_lookup(db):
    db.session.add(AdminUser(email="owner@babyshop.test", is_admin=True))
    db.session.add(AdminUser(email="staff@babyshop.test", is_admin=False))
    db.session.commit()

    assert AdminUser.is_admin_email("Owner@BabyShop.test ")
    assert not AdminUser.is_admin_email("staff@babyshop.test")
    assert not AdminUser.is_admin_email("nobody@babyshop.test")
    assert not AdminUser.is_admin_email("")
