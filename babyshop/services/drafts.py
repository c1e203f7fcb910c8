"""In-memory drafts edited by the admin attributes form.

Drafts are keyed by opaque local keys. A loaded row keeps a key derived
from its persistent id, a freshly added draft gets a random one; variation
drafts point at colors and sizes through those keys and the save path maps
them to persistent ids.
"""
import re
import uuid
from decimal import Decimal, InvalidOperation

HEX_PATTERN = re.compile(r"^#([0-9a-f]{3}){1,2}$", re.IGNORECASE)
DEFAULT_HEX = "#000000"
SIZE_SCALES = ("clothing", "shoes", "age", "custom")
MEDIA_TYPES = ("image", "video")

# Column limits: Numeric(10, 2) prices, 32-bit stock
MAX_PRICE = Decimal("99999999.99")
MAX_STOCK = 2**31 - 1


def new_key(kind):
    return f"{kind}-{uuid.uuid4().hex[:12]}"


def is_valid_hex(value):
    return isinstance(value, str) and bool(HEX_PATTERN.match(value.strip()))


def to_text(value):
    """Payload text field as a stripped string; None becomes ""."""
    if value is None:
        return ""
    return str(value).strip()


def to_decimal(value):
    """Parse a price-like value. Returns None unless it is a finite number."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def to_int(value):
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


class ColorDraft:
    def __init__(self, name, hex_code=DEFAULT_HEX, display_order=0, key=None):
        self.key = key or new_key("color")
        self.name = name or ""
        self.hex_code = hex_code or ""
        self.display_order = display_order

    @classmethod
    def from_row(cls, row):
        return cls(
            name=row.name,
            hex_code=row.hex_code or DEFAULT_HEX,
            display_order=row.display_order,
            key=f"color-{row.id}",
        )

    @classmethod
    def from_dict(cls, data, position=0):
        return cls(
            name=to_text(data.get("name")),
            hex_code=to_text(data.get("hex_code")),
            display_order=position,
            key=to_text(data.get("key")) or None,
        )

    def to_dict(self):
        return {
            "key": self.key,
            "name": self.name,
            "hex_code": self.hex_code,
            "display_order": self.display_order,
        }

    def __repr__(self):
        return f"<ColorDraft {self.key} {self.name}>"


class SizeDraft:
    def __init__(self, name, scale="custom", display_order=0, key=None):
        self.key = key or new_key("size")
        self.name = name or ""
        self.scale = scale or "custom"
        self.display_order = display_order

    @classmethod
    def from_row(cls, row):
        return cls(
            name=row.name,
            scale=row.scale,
            display_order=row.display_order,
            key=f"size-{row.id}",
        )

    @classmethod
    def from_dict(cls, data, position=0):
        return cls(
            name=to_text(data.get("name")),
            scale=to_text(data.get("scale")) or "custom",
            display_order=position,
            key=to_text(data.get("key")) or None,
        )

    def to_dict(self):
        return {
            "key": self.key,
            "name": self.name,
            "scale": self.scale,
            "display_order": self.display_order,
        }

    def __repr__(self):
        return f"<SizeDraft {self.key} {self.name}>"


class MediaDraft:
    """One image or video attached to a variation draft.

    Exactly one source: ``url`` for a link or an already stored object,
    ``data`` for a pending upload (with ``filename`` and ``content_type``).
    """

    def __init__(
        self,
        url=None,
        data=None,
        filename=None,
        content_type=None,
        storage_key=None,
        is_primary=False,
        media_type="image",
        display_order=0,
    ):
        if url and data is not None:
            raise ValueError("A media draft takes either a URL or an upload, not both")
        if not url and data is None:
            raise ValueError("A media draft needs a URL or an upload")
        self.url = url
        self.data = data
        self.filename = filename
        self.content_type = content_type
        self.storage_key = storage_key
        self.is_primary = is_primary
        self.media_type = media_type if media_type in MEDIA_TYPES else "image"
        self.display_order = display_order

    @property
    def is_pending_upload(self):
        return self.data is not None

    @classmethod
    def from_row(cls, row):
        return cls(
            url=row.image_url,
            storage_key=row.storage_key,
            is_primary=row.is_primary,
            media_type=row.media_type,
            display_order=row.display_order,
        )

    def to_dict(self):
        return {
            "url": self.url,
            "storage_key": self.storage_key,
            "filename": self.filename,
            "pending_upload": self.is_pending_upload,
            "is_primary": self.is_primary,
            "media_type": self.media_type,
            "display_order": self.display_order,
        }


class VariationDraft:
    def __init__(
        self,
        color_key=None,
        size_key=None,
        price=None,
        sale_price=None,
        stock=0,
        sku=None,
        is_default=False,
        images=None,
    ):
        self.color_key = color_key
        self.size_key = size_key
        self.price = price
        self.sale_price = sale_price
        self.stock = stock
        self.sku = sku or None
        self.is_default = is_default
        self.images = images or []

    @property
    def combo(self):
        return (self.color_key, self.size_key)

    @classmethod
    def from_row(cls, row):
        return cls(
            color_key=f"color-{row.color_id}" if row.color_id else None,
            size_key=f"size-{row.size_id}" if row.size_id else None,
            price=row.price,
            sale_price=row.sale_price,
            stock=row.stock,
            sku=row.sku,
            is_default=row.is_default,
            images=[MediaDraft.from_row(img) for img in row.images],
        )

    @classmethod
    def from_dict(cls, data):
        return cls(
            color_key=to_text(data.get("color_key")) or None,
            size_key=to_text(data.get("size_key")) or None,
            price=to_decimal(data.get("price")),
            sale_price=to_decimal(data.get("sale_price")),
            stock=to_int(data.get("stock", 0)),
            sku=to_text(data.get("sku")) or None,
            is_default=bool(data.get("is_default")),
        )

    def to_dict(self):
        return {
            "color_key": self.color_key,
            "size_key": self.size_key,
            "sku": self.sku,
            "price": self.price,
            "sale_price": self.sale_price,
            "stock": self.stock,
            "is_default": self.is_default,
            "images": [img.to_dict() for img in self.images],
        }

    def __repr__(self):
        return f"<VariationDraft {self.color_key}/{self.size_key}>"
