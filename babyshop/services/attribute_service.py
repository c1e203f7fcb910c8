"""Persistence for product colors, sizes, variations and variation media.

A product's attribute set is always written as a whole. ``save_attributes``
runs one transaction: the edited rows are inserted first, the previous
rows are deleted afterwards, so a failure at any step rolls back to the
set that was there before.
"""
import logging

from rq import Retry
from sqlalchemy.exc import SQLAlchemyError
from botocore.exceptions import BotoCoreError, ClientError

from babyshop import extensions
from babyshop.extensions import db
from babyshop.errors import PersistenceError, ValidationError
from babyshop.models.attributes import ProductColor, ProductSize
from babyshop.models.audit_log import AuditLog
from babyshop.models.order import Order
from babyshop.models.variation import ProductVariation, ProductVariationImage
from babyshop.services import media_service
from babyshop.services.drafts import DEFAULT_HEX, SIZE_SCALES, is_valid_hex

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

def list_colors(product_id):
    try:
        return (
            ProductColor.query.filter_by(product_id=product_id)
            .order_by(ProductColor.display_order.asc(), ProductColor.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch colors for product %s", product_id)
        raise PersistenceError(
            f"Failed to fetch product colors: {e.__class__.__name__}", product_id
        ) from e


def list_sizes(product_id):
    try:
        return (
            ProductSize.query.filter_by(product_id=product_id)
            .order_by(ProductSize.display_order.asc(), ProductSize.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch sizes for product %s", product_id)
        raise PersistenceError(
            f"Failed to fetch product sizes: {e.__class__.__name__}", product_id
        ) from e


def list_variations(product_id):
    """Variations in insertion order, images ordered by display_order."""
    try:
        return (
            ProductVariation.query.filter_by(product_id=product_id)
            .order_by(ProductVariation.id.asc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch variations for product %s", product_id)
        raise PersistenceError(
            f"Failed to fetch product variations: {e.__class__.__name__}",
            product_id,
        ) from e


def get_attribute_stats(product_id):
    """Counts shown on the product edit page.

    Read failures leave the counts at zero; they never block the page.
    """
    stats = {
        "color_count": 0,
        "size_count": 0,
        "variation_count": 0,
        "has_attributes": False,
    }
    try:
        stats["color_count"] = ProductColor.query.filter_by(product_id=product_id).count()
        stats["size_count"] = ProductSize.query.filter_by(product_id=product_id).count()
        stats["variation_count"] = ProductVariation.query.filter_by(
            product_id=product_id
        ).count()
    except SQLAlchemyError:
        logger.exception("Failed to count attributes for product %s", product_id)
        db.session.rollback()
    stats["has_attributes"] = any(
        stats[k] > 0 for k in ("color_count", "size_count", "variation_count")
    )
    return stats


# ---------------------------------------------------------------------------
# Last-resort coercion
# ---------------------------------------------------------------------------

def coerce_hex(hex_code):
    if not hex_code or not is_valid_hex(hex_code):
        return DEFAULT_HEX
    return hex_code.strip()


def coerce_color_name(name):
    return (name or "").strip() or "Unnamed Color"


def coerce_size_name(name):
    return (name or "").strip() or "Unnamed Size"


def coerce_scale(scale):
    scale = (scale or "").strip()
    return scale if scale in SIZE_SCALES else "custom"


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def _insert_colors(product_id, colors):
    """Insert color drafts, return {local key: persistent id}."""
    key_map = {}
    for position, color in enumerate(colors):
        row = ProductColor(
            product_id=product_id,
            name=coerce_color_name(color.name),
            hex_code=coerce_hex(color.hex_code),
            display_order=position,
        )
        db.session.add(row)
        db.session.flush()
        key_map[color.key] = row.id
    return key_map


def _insert_sizes(product_id, sizes):
    key_map = {}
    for position, size in enumerate(sizes):
        row = ProductSize(
            product_id=product_id,
            name=coerce_size_name(size.name),
            scale=coerce_scale(size.scale),
            display_order=position,
        )
        db.session.add(row)
        db.session.flush()
        key_map[size.key] = row.id
    return key_map


def _resolve_key(key, key_map, kind, index):
    if key is None:
        return None
    if key not in key_map:
        raise ValidationError(f"Variation #{index + 1} references an unknown {kind}")
    return key_map[key]


def _first_flagged(items, flag):
    """Index of the first item with ``flag`` set, 0 when none is."""
    for index, item in enumerate(items):
        if flag(item):
            return index
    return 0


def _insert_variations(product_id, variations, color_map, size_map, resolved_media):
    # Exactly one default per product, exactly one primary per variation
    default_index = _first_flagged(variations, lambda v: v.is_default)
    for index, variation in enumerate(variations):
        row = ProductVariation(
            product_id=product_id,
            color_id=_resolve_key(variation.color_key, color_map, "color", index),
            size_id=_resolve_key(variation.size_key, size_map, "size", index),
            sku=variation.sku,
            price=variation.price,
            sale_price=variation.sale_price,
            stock=variation.stock or 0,
            is_default=index == default_index,
        )
        db.session.add(row)
        db.session.flush()

        media = sorted(resolved_media[index], key=lambda m: m["display_order"])
        primary_index = _first_flagged(media, lambda m: m["is_primary"])
        for position, item in enumerate(media):
            db.session.add(
                ProductVariationImage(
                    variation_id=row.id,
                    image_url=item["url"],
                    storage_key=item["storage_key"],
                    is_primary=position == primary_index,
                    media_type=item["media_type"],
                    display_order=position,
                )
            )
    db.session.flush()


def _delete_variations(variation_ids):
    """Delete variations and their media; orders keep a null reference.

    Returns the storage keys of the deleted media.
    """
    if not variation_ids:
        return []
    storage_keys = [
        key
        for (key,) in db.session.query(ProductVariationImage.storage_key).filter(
            ProductVariationImage.variation_id.in_(variation_ids),
            ProductVariationImage.storage_key.isnot(None),
        )
    ]
    Order.query.filter(Order.variation_id.in_(variation_ids)).update(
        {Order.variation_id: None}, synchronize_session=False
    )
    ProductVariationImage.query.filter(
        ProductVariationImage.variation_id.in_(variation_ids)
    ).delete(synchronize_session=False)
    ProductVariation.query.filter(ProductVariation.id.in_(variation_ids)).delete(
        synchronize_session=False
    )
    return storage_keys


def _delete_previous(variation_ids, color_ids, size_ids):
    storage_keys = _delete_variations(variation_ids)
    if color_ids:
        ProductColor.query.filter(ProductColor.id.in_(color_ids)).delete(
            synchronize_session=False
        )
    if size_ids:
        ProductSize.query.filter(ProductSize.id.in_(size_ids)).delete(
            synchronize_session=False
        )
    db.session.flush()
    return storage_keys


def _existing_ids(model, product_id):
    return [row_id for (row_id,) in db.session.query(model.id).filter_by(product_id=product_id)]


def enqueue_media_cleanup(storage_keys):
    """Hand orphaned blobs to the worker. Never fails the caller."""
    if not storage_keys:
        return
    try:
        extensions.task_queue.enqueue(
            "babyshop.workers.media_cleanup.delete_orphaned_media",
            list(storage_keys),
            retry=Retry(max=3, interval=[10, 60, 300]),
        )
    except Exception:
        logger.exception("Failed to enqueue cleanup of %d media objects", len(storage_keys))


def replace_colors(product_id, colors):
    """Replace a product's colors. Variations on the old colors go with them."""
    try:
        old_color_ids = _existing_ids(ProductColor, product_id)
        key_map = _insert_colors(product_id, colors)
        dependent = []
        if old_color_ids:
            dependent = [
                row_id
                for (row_id,) in db.session.query(ProductVariation.id).filter(
                    ProductVariation.color_id.in_(old_color_ids)
                )
            ]
        orphaned = _delete_previous(dependent, old_color_ids, [])
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to replace colors for product %s", product_id)
        raise PersistenceError(
            f"Failed to save product colors: {e.__class__.__name__}", product_id
        ) from e
    enqueue_media_cleanup(orphaned)
    return [db.session.get(ProductColor, key_map[c.key]) for c in colors]


def replace_sizes(product_id, sizes):
    """Replace a product's sizes. Variations on the old sizes go with them."""
    try:
        old_size_ids = _existing_ids(ProductSize, product_id)
        key_map = _insert_sizes(product_id, sizes)
        dependent = []
        if old_size_ids:
            dependent = [
                row_id
                for (row_id,) in db.session.query(ProductVariation.id).filter(
                    ProductVariation.size_id.in_(old_size_ids)
                )
            ]
        orphaned = _delete_previous(dependent, [], old_size_ids)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to replace sizes for product %s", product_id)
        raise PersistenceError(
            f"Failed to save product sizes: {e.__class__.__name__}", product_id
        ) from e
    enqueue_media_cleanup(orphaned)
    return [db.session.get(ProductSize, key_map[s.key]) for s in sizes]


def _resolve_media(variations):
    """Upload pending files in display order, per variation.

    Returns ``(resolved, uploaded_keys)`` where ``resolved[i]`` lists the
    rows to write for variation ``i``.
    """
    resolved = []
    uploaded_keys = []
    try:
        for variation in variations:
            items = []
            for media in sorted(variation.images, key=lambda m: m.display_order):
                if media.is_pending_upload:
                    storage_key, url = media_service.store_upload(media)
                    uploaded_keys.append(storage_key)
                else:
                    storage_key = media.storage_key
                    url = media.url
                items.append(
                    {
                        "url": url,
                        "storage_key": storage_key,
                        "is_primary": media.is_primary,
                        "media_type": media.media_type,
                        "display_order": media.display_order,
                    }
                )
            resolved.append(items)
    except ValidationError:
        enqueue_media_cleanup(uploaded_keys)
        raise
    except (BotoCoreError, ClientError) as e:
        enqueue_media_cleanup(uploaded_keys)
        logger.exception("Variation media upload failed")
        raise PersistenceError(f"Failed to upload variation media: {e}") from e
    return resolved, uploaded_keys


def save_attributes(product_id, colors, sizes, variations, admin_email=None):
    """Replace the full attribute graph of a product.

    Media is uploaded before the transaction opens. Blobs that belonged to
    the previous set and are not reused are queued for deletion once the
    transaction commits; freshly uploaded blobs are queued instead when it
    rolls back.
    """
    logger.info(
        "Saving attributes for product %s: %d colors, %d sizes, %d variations",
        product_id,
        len(colors),
        len(sizes),
        len(variations),
    )
    resolved_media, uploaded_keys = _resolve_media(variations)
    kept_keys = {
        item["storage_key"]
        for items in resolved_media
        for item in items
        if item["storage_key"]
    }

    try:
        old_variation_ids = _existing_ids(ProductVariation, product_id)
        old_color_ids = _existing_ids(ProductColor, product_id)
        old_size_ids = _existing_ids(ProductSize, product_id)

        color_map = _insert_colors(product_id, colors)
        size_map = _insert_sizes(product_id, sizes)
        _insert_variations(product_id, variations, color_map, size_map, resolved_media)

        previous_keys = _delete_previous(old_variation_ids, old_color_ids, old_size_ids)

        if admin_email:
            db.session.add(
                AuditLog(
                    admin_email=admin_email,
                    action="SAVE_ATTRIBUTES",
                    product_id=product_id,
                    payload={
                        "colors": len(colors),
                        "sizes": len(sizes),
                        "variations": len(variations),
                    },
                )
            )
        db.session.commit()
    except ValidationError:
        db.session.rollback()
        enqueue_media_cleanup(uploaded_keys)
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        enqueue_media_cleanup(uploaded_keys)
        logger.exception("Failed to save attributes for product %s", product_id)
        raise PersistenceError(
            f"Failed to save product attributes: {e.__class__.__name__}", product_id
        ) from e

    enqueue_media_cleanup([k for k in previous_keys if k not in kept_keys])
    logger.info("Product %s attributes saved", product_id)
