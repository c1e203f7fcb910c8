"""Expand a product's colors and sizes into variation drafts."""
from babyshop.services.drafts import VariationDraft


def _draft(color_key, size_key, base_price, is_default):
    return VariationDraft(
        color_key=color_key,
        size_key=size_key,
        price=base_price,
        sale_price=None,
        stock=0,
        is_default=is_default,
    )


def generate_all(colors, sizes, base_price):
    """Build the full candidate variation set.

    - no colors and no sizes: one attribute-less variation
    - one dimension populated: one variation per value
    - both populated: the colors x sizes cross-product, colors outer

    The first draft in caller order is the default. Callers replace their
    current list with the result.
    """
    if not colors and not sizes:
        return [_draft(None, None, base_price, True)]

    if not sizes:
        pairs = [(color.key, None) for color in colors]
    elif not colors:
        pairs = [(None, size.key) for size in sizes]
    else:
        pairs = [(color.key, size.key) for color in colors for size in sizes]

    return [
        _draft(color_key, size_key, base_price, index == 0)
        for index, (color_key, size_key) in enumerate(pairs)
    ]


def add_one(colors, sizes, base_price, existing):
    """A single draft on the first color and size, appended by the caller.

    Default only when ``existing`` is empty.
    """
    return _draft(
        colors[0].key if colors else None,
        sizes[0].key if sizes else None,
        base_price,
        len(existing) == 0,
    )
