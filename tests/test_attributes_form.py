"""Tests for admin form editing and validation."""
from decimal import Decimal

import pytest

from babyshop.errors import MediaError, ValidationError
from babyshop.services.attributes_form import AttributesForm, FormState
from babyshop.services.drafts import ColorDraft, SizeDraft, is_valid_hex


def _form(product):
    form = AttributesForm(product)
    form.load()
    return form


@pytest.mark.parametrize("value", ["#F00", "#ff0000", "#AbC", "#123456"])
def test_valid_hex_codes(value):
    assert is_valid_hex(value)


@pytest.mark.parametrize("value", ["FF0000", "#ff00", "red", "", "#GGGGGG", None])
def test_invalid_hex_codes(value):
    assert not is_valid_hex(value)


def test_load_starts_ready_and_empty(product):
    form = _form(product)
    assert form.state == FormState.READY
    assert form.colors == [] and form.variations == []
    assert form.validate() is None


def test_validation_order_color_name_first(product):
    form = _form(product)
    form.colors = [ColorDraft("Red", "nope"), ColorDraft("", "#000")]
    assert form.validate() == "Color #2 needs a name"


def test_validation_hex(product):
    form = _form(product)
    form.colors = [ColorDraft("Red", "red")]
    assert form.validate() == "Color #1 (Red) needs a valid hex color code"


def test_validation_size_name(product):
    form = _form(product)
    form.sizes = [SizeDraft("  ")]
    assert form.validate() == "Size #1 needs a name"


def test_validation_requires_variation_when_attributes_exist(product):
    form = _form(product)
    form.add_color("Red", "#FF0000")
    assert form.validate() == "You need to create at least one variation for your product"


def test_validation_price_then_stock(product):
    form = _form(product)
    form.add_variation()
    form.variations[0].price = Decimal("0")
    form.variations[0].stock = -1
    assert form.validate() == "Variation #1 needs a valid price"

    form.variations[0].price = Decimal("10")
    assert form.validate() == "Variation #1 cannot have negative stock"


@pytest.mark.parametrize("price", ["NaN", "Infinity", "-Infinity", "sNaN", "abc", "100000000", True])
def test_non_finite_or_out_of_range_price_is_rejected(product, price):
    form = AttributesForm.from_payload(
        product, {"variations": [{"price": price, "stock": 1}]}
    )

    assert form.validate() == "Variation #1 needs a valid price"
    assert form.save() is False
    assert form.state == FormState.READY


def test_non_numeric_stock_is_rejected(product):
    form = AttributesForm.from_payload(
        product, {"variations": [{"price": "10", "stock": "Infinity"}]}
    )
    assert form.validate() == "Variation #1 cannot have negative stock"

    form.variations[0].stock = 2**31
    assert form.validate() == "Variation #1 stock is too large"


def test_validation_sale_price_below_price(product):
    form = _form(product)
    form.add_variation()
    form.variations[0].sale_price = Decimal("900")
    assert form.validate() == "Variation #1 sale price must be lower than its price"


def test_validation_duplicate_combination(product):
    form = _form(product)
    form.add_color("Red", "#FF0000")
    form.add_variation()
    form.add_variation()
    assert form.validate() == "Variation #2 duplicates another color and size combination"


def test_add_color_rejects_bad_input(product):
    form = _form(product)
    with pytest.raises(ValidationError):
        form.add_color("", "#FF0000")
    with pytest.raises(ValidationError):
        form.add_color("Red", "FF0000")


def test_update_color_ignores_invalid_hex(product):
    form = _form(product)
    form.add_color("Red", "#FF0000")
    form.update_color(0, hex_code="#12")
    assert form.colors[0].hex_code == "#FF0000"
    form.update_color(0, hex_code="")
    assert form.colors[0].hex_code == "#000000"


def test_remove_and_move_colors_renumber(product):
    form = _form(product)
    for name in ("Red", "Blue", "Green"):
        form.add_color(name, "#000")

    form.move_color(2, 0)
    assert [c.name for c in form.colors] == ["Green", "Red", "Blue"]
    assert [c.display_order for c in form.colors] == [0, 1, 2]

    form.remove_color(1)
    assert [(c.name, c.display_order) for c in form.colors] == [("Green", 0), ("Blue", 1)]


def test_removing_color_drops_its_variations(product):
    form = _form(product)
    form.add_color("Red", "#F00")
    form.add_color("Blue", "#00F")
    form.generate_all_variations()

    form.remove_color(0)

    assert len(form.variations) == 1
    assert form.variations[0].color_key == form.colors[0].key
    assert form.variations[0].is_default


def test_add_common_sizes_skips_existing(product):
    form = _form(product)
    form.add_size("M", "clothing")
    added = form.add_common_sizes("clothing")
    assert [s.name for s in added] == ["XS", "S", "L", "XL", "XXL"]
    assert [s.display_order for s in form.sizes] == list(range(6))
    assert form.add_common_sizes("custom") == []


def test_remove_default_variation_reassigns(product):
    form = _form(product)
    form.add_color("Red", "#F00")
    form.add_color("Blue", "#00F")
    form.generate_all_variations()

    form.remove_variation(0)

    assert form.variations[0].is_default


def test_set_default_clears_others(product):
    form = _form(product)
    form.add_size("S")
    form.add_size("M")
    form.generate_all_variations()

    form.update_variation(1, is_default=True, stock=4)

    assert [v.is_default for v in form.variations] == [False, True]
    assert form.variations[1].stock == 4


def test_filter_variations_by_tab(product):
    form = _form(product)
    red = form.add_color("Red", "#F00")
    form.add_color("Blue", "#00F")
    small = form.add_size("S")
    form.add_size("M")
    form.generate_all_variations()

    assert len(form.filter_variations("all")) == 4
    assert len(form.filter_variations("default")) == 1
    assert len(form.filter_variations(f"color:{red.key}")) == 2
    assert len(form.filter_variations(f"size:{small.key}")) == 2


def test_media_primary_and_order(product, png_bytes):
    form = _form(product)
    form.add_variation()
    first = form.add_media_file(0, png_bytes, "a.png", "image/png")
    second = form.add_media_url(0, "https://cdn.example.test/b.jpg")
    third = form.add_media_file(0, b"\x00video", "clip.mp4", "video/mp4")

    assert first.is_primary and not second.is_primary
    assert third.media_type == "video"

    form.move_media(0, 2, 0)
    assert [m.display_order for m in form.variations[0].images] == [0, 1, 2]
    assert form.variations[0].images[0] is third

    form.set_primary_media(0, 2)
    assert [m.is_primary for m in form.variations[0].images] == [False, False, True]

    form.remove_media(0, 2)
    assert form.variations[0].images[0].is_primary
    assert [m.display_order for m in form.variations[0].images] == [0, 1]


def test_media_url_must_be_valid(product):
    form = _form(product)
    form.add_variation()
    with pytest.raises(MediaError):
        form.add_media_url(0, "not a url")


def test_payload_rejects_url_and_upload_together(product):
    payload = {
        "variations": [
            {
                "price": "100",
                "stock": 1,
                "images": [{"url": "https://x.test/a.jpg", "upload": "file0"}],
            }
        ]
    }
    with pytest.raises(MediaError):
        AttributesForm.from_payload(product, payload)


def test_payload_round_trips_keys(product):
    payload = {
        "colors": [{"key": "c1", "name": "Red", "hex_code": "#F00"}],
        "sizes": [{"key": "s1", "name": "S", "scale": "clothing"}],
        "variations": [
            {"color_key": "c1", "size_key": "s1", "price": "120.50", "stock": "3"}
        ],
    }
    form = AttributesForm.from_payload(product, payload)

    assert form.state == FormState.READY
    assert form.variations[0].price == Decimal("120.50")
    assert form.variations[0].stock == 3
    assert form.validate() is None


def test_validation_failure_blocks_save(product):
    saved = []
    form = AttributesForm(product, on_saved=lambda: saved.append(True))
    form.load()
    form.colors = [ColorDraft("", "#FFF")]

    assert form.save() is False
    assert form.state == FormState.READY
    assert form.error == "Color #1 needs a name"
    assert saved == []
