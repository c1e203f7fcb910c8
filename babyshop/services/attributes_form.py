"""Admin editing session for a product's attribute graph.

The form holds colors, sizes and variations as drafts, edits them in
memory and hands the whole set to ``attribute_service.save_attributes``.

States: LOADING -> READY -> SAVING -> READY | ERROR
"""
import logging

from babyshop.errors import MediaError, PersistenceError, ValidationError
from babyshop.services import attribute_service, media_service, variation_generator
from babyshop.services.drafts import (
    DEFAULT_HEX,
    MAX_PRICE,
    MAX_STOCK,
    SIZE_SCALES,
    ColorDraft,
    MediaDraft,
    SizeDraft,
    VariationDraft,
    is_valid_hex,
    to_int,
    to_text,
)

logger = logging.getLogger(__name__)

COMMON_SIZES = {
    "clothing": ["XS", "S", "M", "L", "XL", "XXL"],
    "shoes": ["5", "6", "7", "8", "9", "10", "11"],
    "age": ["Newborn", "0-3M", "3-6M", "6-12M", "12-18M", "18-24M"],
}


class FormState:
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    ERROR = "error"


def _move(items, source, destination):
    item = items.pop(source)
    items.insert(destination, item)


def _renumber(items):
    for position, item in enumerate(items):
        item.display_order = position


def _entries(data, name):
    """A list-of-objects field of the admin payload; missing means empty."""
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise ValidationError(f"{name} must be a list of objects")
    return value


class AttributesForm:
    def __init__(self, product, on_saved=None, admin_email=None):
        self.product = product
        self.on_saved = on_saved
        self.admin_email = admin_email
        self.colors = []
        self.sizes = []
        self.variations = []
        self.state = FormState.LOADING
        self.error = None
        # True once the last save reached the database, even if the reload failed
        self.saved = False

    @property
    def base_price(self):
        return self.product.price

    # -- lifecycle ----------------------------------------------------------

    def load(self):
        """Read the stored attribute set into drafts."""
        self.state = FormState.LOADING
        self.error = None
        try:
            self.colors = [
                ColorDraft.from_row(row)
                for row in attribute_service.list_colors(self.product.id)
            ]
            self.sizes = [
                SizeDraft.from_row(row)
                for row in attribute_service.list_sizes(self.product.id)
            ]
            self.variations = [
                VariationDraft.from_row(row)
                for row in attribute_service.list_variations(self.product.id)
            ]
        except PersistenceError as e:
            logger.exception("Failed to load attributes for product %s", self.product.id)
            self.state = FormState.ERROR
            self.error = str(e) or "Failed to load existing attributes"
            return False
        self.state = FormState.READY
        return True

    def validate(self):
        """Return the first problem found, or None."""
        for i, color in enumerate(self.colors):
            if not color.name.strip():
                return f"Color #{i + 1} needs a name"
        for i, color in enumerate(self.colors):
            if not is_valid_hex(color.hex_code):
                return f"Color #{i + 1} ({color.name}) needs a valid hex color code"

        for i, size in enumerate(self.sizes):
            if not size.name.strip():
                return f"Size #{i + 1} needs a name"

        if (self.colors or self.sizes) and not self.variations:
            return "You need to create at least one variation for your product"

        for i, variation in enumerate(self.variations):
            if variation.price is None or not 0 < variation.price <= MAX_PRICE:
                return f"Variation #{i + 1} needs a valid price"
        for i, variation in enumerate(self.variations):
            if variation.stock is None or variation.stock < 0:
                return f"Variation #{i + 1} cannot have negative stock"
            if variation.stock > MAX_STOCK:
                return f"Variation #{i + 1} stock is too large"

        for i, variation in enumerate(self.variations):
            if variation.sale_price is not None and variation.sale_price >= variation.price:
                return f"Variation #{i + 1} sale price must be lower than its price"

        color_keys = {c.key for c in self.colors}
        size_keys = {s.key for s in self.sizes}
        seen = set()
        for i, variation in enumerate(self.variations):
            if variation.color_key is not None and variation.color_key not in color_keys:
                return f"Variation #{i + 1} references an unknown color"
            if variation.size_key is not None and variation.size_key not in size_keys:
                return f"Variation #{i + 1} references an unknown size"
            if variation.combo in seen:
                return f"Variation #{i + 1} duplicates another color and size combination"
            seen.add(variation.combo)
        return None

    def save(self):
        """Validate and persist. Returns True on success.

        A validation failure leaves the form READY with ``error`` set; a
        backend failure moves it to ERROR. When the write succeeds but the
        reload does not, ``saved`` is True, the form is in ERROR and
        ``on_saved`` is not called.
        """
        problem = self.validate()
        if problem:
            self.error = problem
            return False

        self.state = FormState.SAVING
        self.error = None
        self.saved = False
        try:
            attribute_service.save_attributes(
                self.product.id,
                self.colors,
                self.sizes,
                self.variations,
                admin_email=self.admin_email,
            )
        except ValidationError as e:
            self.state = FormState.READY
            self.error = str(e)
            return False
        except PersistenceError as e:
            logger.error("Saving attributes for product %s failed: %s", self.product.id, e)
            self.state = FormState.ERROR
            self.error = str(e)
            return False

        self.saved = True
        # Reload so drafts carry keys of the rows that now exist
        if not self.load():
            logger.error("Attributes of product %s saved but reload failed", self.product.id)
            self.error = "Attributes were saved but could not be reloaded. Please refresh the page."
            return False
        if self.on_saved is not None:
            self.on_saved()
        return True

    # -- colors ---------------------------------------------------------------

    def add_color(self, name, hex_code=DEFAULT_HEX):
        name = (name or "").strip()
        hex_code = (hex_code or "").strip()
        if not name:
            raise ValidationError("Please enter a color name")
        if not is_valid_hex(hex_code):
            raise ValidationError("Please enter a valid hex color code (e.g., #FF0000)")
        color = ColorDraft(name, hex_code, display_order=len(self.colors))
        self.colors.append(color)
        return color

    def update_color(self, index, name=None, hex_code=None):
        color = self.colors[index]
        if name is not None:
            color.name = name
        if hex_code is not None:
            hex_code = hex_code.strip() or DEFAULT_HEX
            # Invalid codes are ignored, the previous value stays
            if is_valid_hex(hex_code):
                color.hex_code = hex_code
        return color

    def remove_color(self, index):
        color = self.colors.pop(index)
        _renumber(self.colors)
        self._drop_variations(lambda v: v.color_key == color.key)
        return color

    def move_color(self, source, destination):
        _move(self.colors, source, destination)
        _renumber(self.colors)

    # -- sizes ----------------------------------------------------------------

    def add_size(self, name, scale="clothing"):
        name = (name or "").strip()
        if not name:
            return None
        size = SizeDraft(name, scale if scale in SIZE_SCALES else "custom", len(self.sizes))
        self.sizes.append(size)
        return size

    def add_common_sizes(self, scale):
        """Append the usual sizes of a scale, skipping names already present."""
        existing = {s.name for s in self.sizes}
        added = []
        for name in COMMON_SIZES.get(scale, []):
            if name in existing:
                continue
            size = SizeDraft(name, scale, len(self.sizes))
            self.sizes.append(size)
            added.append(size)
        return added

    def update_size(self, index, name=None, scale=None):
        size = self.sizes[index]
        if name is not None:
            size.name = name
        if scale is not None:
            size.scale = scale if scale in SIZE_SCALES else "custom"
        return size

    def remove_size(self, index):
        size = self.sizes.pop(index)
        _renumber(self.sizes)
        self._drop_variations(lambda v: v.size_key == size.key)
        return size

    def move_size(self, source, destination):
        _move(self.sizes, source, destination)
        _renumber(self.sizes)

    # -- variations -----------------------------------------------------------

    def generate_all_variations(self):
        self.variations = variation_generator.generate_all(
            self.colors, self.sizes, self.base_price
        )
        return self.variations

    def add_variation(self):
        variation = variation_generator.add_one(
            self.colors, self.sizes, self.base_price, self.variations
        )
        self.variations.append(variation)
        return variation

    def remove_variation(self, index):
        removed = self.variations.pop(index)
        if removed.is_default and self.variations:
            self.variations[0].is_default = True
        return removed

    def _drop_variations(self, predicate):
        had_default = any(v.is_default for v in self.variations if predicate(v))
        self.variations = [v for v in self.variations if not predicate(v)]
        if had_default and self.variations:
            self.variations[0].is_default = True

    def set_default(self, index):
        for variation in self.variations:
            variation.is_default = False
        self.variations[index].is_default = True

    def update_variation(self, index, **fields):
        variation = self.variations[index]
        if fields.get("is_default"):
            self.set_default(index)
        for name in ("color_key", "size_key", "sku", "price", "sale_price", "stock"):
            if name in fields:
                setattr(variation, name, fields[name])
        return variation

    def filter_variations(self, tab="all"):
        """Variations shown under an admin tab: all, default, color:<key>, size:<key>."""
        if tab == "all":
            return list(self.variations)
        if tab == "default":
            return [v for v in self.variations if v.is_default]
        kind, _, key = tab.partition(":")
        if kind == "color":
            return [v for v in self.variations if v.color_key == key]
        if kind == "size":
            return [v for v in self.variations if v.size_key == key]
        return []

    # -- media ----------------------------------------------------------------

    def add_media_file(self, index, data, filename, content_type):
        images = self.variations[index].images
        media = MediaDraft(
            data=data,
            filename=filename,
            content_type=content_type,
            is_primary=len(images) == 0,
            media_type=media_service.media_type_for(content_type),
            display_order=len(images),
        )
        images.append(media)
        return media

    def add_media_url(self, index, url, media_type="image"):
        images = self.variations[index].images
        media = MediaDraft(
            url=media_service.normalize_media_url(url),
            is_primary=len(images) == 0,
            media_type=media_type,
            display_order=len(images),
        )
        images.append(media)
        return media

    def remove_media(self, index, position):
        images = self.variations[index].images
        removed = images.pop(position)
        if removed.is_primary and images:
            images[0].is_primary = True
        _renumber(images)
        return removed

    def set_primary_media(self, index, position):
        images = self.variations[index].images
        for media in images:
            media.is_primary = False
        images[position].is_primary = True

    def move_media(self, index, source, destination):
        images = self.variations[index].images
        _move(images, source, destination)
        _renumber(images)

    # -- payloads -------------------------------------------------------------

    @classmethod
    def from_payload(cls, product, payload, files=None, admin_email=None, on_saved=None):
        """Build a READY form from the admin API body.

        Media entries carry either ``url`` (a link or a previously stored
        object, with its ``storage_key``) or ``upload``, the name of a
        multipart file field in ``files``.
        """
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        files = files or {}
        form = cls(product, on_saved=on_saved, admin_email=admin_email)
        form.colors = [
            ColorDraft.from_dict(item, position)
            for position, item in enumerate(_entries(payload, "colors"))
        ]
        form.sizes = [
            SizeDraft.from_dict(item, position)
            for position, item in enumerate(_entries(payload, "sizes"))
        ]
        for item in _entries(payload, "variations"):
            variation = VariationDraft.from_dict(item)
            for position, media in enumerate(_entries(item, "images")):
                variation.images.append(cls._media_from_dict(media, position, files))
            form.variations.append(variation)
        form.state = FormState.READY
        return form

    @staticmethod
    def _media_from_dict(data, position, files):
        url = data.get("url")
        upload = to_text(data.get("upload"))
        if url and upload:
            raise MediaError("Use either a file upload or a URL for each image, not both")
        display_order = to_int(data.get("display_order"))
        if display_order is None:
            display_order = position
        media_type = to_text(data.get("media_type"))
        if upload:
            storage = files.get(upload)
            if storage is None:
                raise MediaError(f"Missing uploaded file: {upload}")
            content_type = storage.mimetype or ""
            return MediaDraft(
                data=storage.read(),
                filename=storage.filename,
                content_type=content_type,
                is_primary=bool(data.get("is_primary")),
                media_type=media_type or media_service.media_type_for(content_type),
                display_order=display_order,
            )
        return MediaDraft(
            url=media_service.normalize_media_url(url),
            storage_key=to_text(data.get("storage_key")) or None,
            is_primary=bool(data.get("is_primary")),
            media_type=media_type or "image",
            display_order=display_order,
        )

    def to_dict(self):
        return {
            "state": self.state,
            "error": self.error,
            "base_price": self.base_price,
            "colors": [c.to_dict() for c in self.colors],
            "sizes": [s.to_dict() for s in self.sizes],
            "variations": [v.to_dict() for v in self.variations],
        }
