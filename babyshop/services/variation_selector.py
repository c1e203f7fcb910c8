"""Storefront color/size selection for a product's variations."""
import logging

from babyshop.services import attribute_service

logger = logging.getLogger(__name__)


class VariationSelector:
    """Resolve the shopper's color and size choice to one variation.

    A dimension the product doesn't have (no colors, or no sizes) is
    satisfied automatically. ``on_variation_change`` receives the resolved
    variation as a dict, or None, every time the selection changes.
    """

    def __init__(self, colors, sizes, variations, on_variation_change=None):
        self.colors = list(colors)
        self.sizes = list(sizes)
        self.variations = list(variations)
        self.on_variation_change = on_variation_change
        self.selected_color_id = None
        self.selected_size_id = None
        self.resolved_variation = None

    @classmethod
    def load(cls, product_id, on_variation_change=None):
        """Fetch the product's attributes and pre-select the default variation."""
        selector = cls(
            attribute_service.list_colors(product_id),
            attribute_service.list_sizes(product_id),
            attribute_service.list_variations(product_id),
            on_variation_change=on_variation_change,
        )
        selector.select_default()
        return selector

    @property
    def has_colors(self):
        return len(self.colors) > 0

    @property
    def has_sizes(self):
        return len(self.sizes) > 0

    @property
    def is_empty(self):
        """No picker to show: a product needs colors, sizes and variations.

        Resolution still works for an empty selector, so the default
        variation reaches the product page through the callback.
        """
        return not (self.variations and self.has_colors and self.has_sizes)

    def select_default(self):
        if not self.variations:
            return None
        default = next((v for v in self.variations if v.is_default), self.variations[0])
        self.selected_color_id = default.color_id
        self.selected_size_id = default.size_id
        return self._resolve()

    def select_color(self, color_id):
        self.selected_color_id = color_id
        return self._resolve()

    def select_size(self, size_id):
        self.selected_size_id = size_id
        return self._resolve()

    def select(self, color_id=None, size_id=None):
        self.selected_color_id = color_id
        self.selected_size_id = size_id
        return self._resolve()

    def _matches(self, variation, color_id, size_id):
        if self.has_colors and variation.color_id != color_id:
            return False
        if self.has_sizes and variation.size_id != size_id:
            return False
        return True

    def find_variation(self, color_id, size_id):
        if self.has_colors and color_id is None:
            return None
        if self.has_sizes and size_id is None:
            return None
        for variation in self.variations:
            if self._matches(variation, color_id, size_id):
                return variation
        return None

    def _enrich(self, variation):
        color = next((c for c in self.colors if c.id == variation.color_id), None)
        size = next((s for s in self.sizes if s.id == variation.size_id), None)
        data = variation.to_dict()
        data["color_name"] = color.name if color else ""
        data["size_name"] = size.name if size else ""
        data["color_hex"] = color.hex_code if color else "#000000"
        data["effective_price"] = variation.effective_price
        data["in_stock"] = variation.in_stock
        return data

    def _resolve(self):
        variation = self.find_variation(self.selected_color_id, self.selected_size_id)
        self.resolved_variation = self._enrich(variation) if variation else None
        if self.on_variation_change is not None:
            self.on_variation_change(self.resolved_variation)
        return self.resolved_variation

    def is_color_available(self, color_id):
        """False when no in-stock variation pairs this color with the chosen size."""
        if self.has_sizes:
            if self.selected_size_id is None:
                return True
            return any(
                v.color_id == color_id and v.size_id == self.selected_size_id and v.stock > 0
                for v in self.variations
            )
        return any(v.color_id == color_id and v.stock > 0 for v in self.variations)

    def is_size_available(self, size_id):
        """False when no in-stock variation pairs this size with the chosen color."""
        if self.has_colors:
            if self.selected_color_id is None:
                return True
            return any(
                v.size_id == size_id and v.color_id == self.selected_color_id and v.stock > 0
                for v in self.variations
            )
        return any(v.size_id == size_id and v.stock > 0 for v in self.variations)

    def to_dict(self):
        if self.is_empty:
            return {
                "empty": True,
                "colors": [],
                "sizes": [],
                "selected_color_id": None,
                "selected_size_id": None,
                "variation": self.resolved_variation,
            }
        return {
            "empty": False,
            "colors": [
                dict(c.to_dict(), available=self.is_color_available(c.id))
                for c in self.colors
            ],
            "sizes": [
                dict(s.to_dict(), available=self.is_size_available(s.id))
                for s in self.sizes
            ],
            "selected_color_id": self.selected_color_id,
            "selected_size_id": self.selected_size_id,
            "variation": self.resolved_variation,
        }
