"""Tests for storefront variation resolution and option disabling."""
from decimal import Decimal

from babyshop.models.attributes import ProductColor, ProductSize
from babyshop.models.variation import ProductVariation
from babyshop.services.variation_selector import VariationSelector

RED = ProductColor(id=1, name="Red", hex_code="#FF0000", display_order=0)
BLUE = ProductColor(id=2, name="Blue", hex_code="#0000FF", display_order=1)
SMALL = ProductSize(id=10, name="S", scale="clothing", display_order=0)
MEDIUM = ProductSize(id=11, name="M", scale="clothing", display_order=1)


def _variation(id, color, size, stock, is_default=False, price="500"):
    return ProductVariation(
        id=id,
        color_id=color.id if color else None,
        size_id=size.id if size else None,
        price=Decimal(price),
        stock=stock,
        is_default=is_default,
    )


def test_selecting_existing_pair_resolves_variation():
    variations = [_variation(100, RED, SMALL, 3), _variation(101, BLUE, MEDIUM, 2)]
    selector = VariationSelector([RED, BLUE], [SMALL, MEDIUM], variations)

    selector.select_color(BLUE.id)
    resolved = selector.select_size(MEDIUM.id)

    assert resolved["id"] == 101
    assert resolved["color_name"] == "Blue"
    assert resolved["size_name"] == "M"
    assert resolved["color_hex"] == "#0000FF"


def test_selecting_missing_pair_resolves_none():
    variations = [_variation(100, RED, SMALL, 3)]
    selector = VariationSelector([RED, BLUE], [SMALL], variations)

    selector.select_color(BLUE.id)
    assert selector.select_size(SMALL.id) is None
    assert selector.resolved_variation is None


def test_partial_selection_resolves_none():
    selector = VariationSelector([RED], [SMALL], [_variation(100, RED, SMALL, 1)])
    assert selector.select_color(RED.id) is None


def test_stock_disables_color_for_selected_size():
    variations = [_variation(100, RED, SMALL, 0), _variation(101, RED, MEDIUM, 5)]
    selector = VariationSelector([RED], [SMALL, MEDIUM], variations)

    selector.select_size(SMALL.id)
    assert selector.is_color_available(RED.id) is False

    selector.select_size(MEDIUM.id)
    assert selector.is_color_available(RED.id) is True


def test_everything_enabled_before_any_selection():
    variations = [_variation(100, RED, SMALL, 0)]
    selector = VariationSelector([RED], [SMALL], variations)

    assert selector.is_color_available(RED.id)
    assert selector.is_size_available(SMALL.id)


def test_single_dimension_is_auto_satisfied():
    variations = [_variation(100, RED, None, 4), _variation(101, BLUE, None, 0)]
    selector = VariationSelector([RED, BLUE], [], variations)

    resolved = selector.select_color(RED.id)

    assert resolved["id"] == 100
    assert resolved["size_name"] == ""
    assert selector.is_color_available(BLUE.id) is False


def test_callback_fires_on_every_change():
    seen = []
    variations = [_variation(100, RED, SMALL, 1), _variation(101, RED, MEDIUM, 1)]
    selector = VariationSelector(
        [RED], [SMALL, MEDIUM], variations, on_variation_change=seen.append
    )

    selector.select_color(RED.id)
    selector.select_size(MEDIUM.id)

    assert seen[0] is None
    assert seen[1]["id"] == 101


def test_default_variation_is_preselected():
    variations = [
        _variation(100, RED, SMALL, 1),
        _variation(101, BLUE, MEDIUM, 1, is_default=True),
    ]
    selector = VariationSelector([RED, BLUE], [SMALL, MEDIUM], variations)

    resolved = selector.select_default()

    assert selector.selected_color_id == BLUE.id
    assert selector.selected_size_id == MEDIUM.id
    assert resolved["id"] == 101


def test_effective_price_uses_sale_price():
    variation = _variation(100, RED, None, 1)
    variation.sale_price = Decimal("450")
    selector = VariationSelector([RED], [], [variation])

    assert selector.select_color(RED.id)["effective_price"] == Decimal("450")


def test_empty_product_renders_nothing():
    selector = VariationSelector([], [], [])
    assert selector.is_empty
    assert selector.to_dict()["empty"] is True

    lone = VariationSelector([], [], [_variation(100, None, None, 3, is_default=True)])
    assert lone.is_empty
    assert lone.select_default()["id"] == 100


def test_colors_without_sizes_render_nothing_but_still_resolve():
    seen = []
    variations = [_variation(100, RED, None, 2, is_default=True), _variation(101, BLUE, None, 0)]
    selector = VariationSelector([RED, BLUE], [], variations, on_variation_change=seen.append)

    selector.select_default()
    data = selector.to_dict()

    assert selector.is_empty
    assert data["empty"] is True
    assert data["colors"] == [] and data["sizes"] == []
    assert data["variation"]["id"] == 100
    assert seen[-1]["id"] == 100


def test_to_dict_reports_availability():
    variations = [_variation(100, RED, SMALL, 0), _variation(101, BLUE, SMALL, 2)]
    selector = VariationSelector([RED, BLUE], [SMALL], variations)
    selector.select_size(SMALL.id)

    data = selector.to_dict()

    assert [c["available"] for c in data["colors"]] == [False, True]
    assert data["sizes"][0]["available"] is True
