"""RQ worker job: delete variation media no longer referenced by any row."""
import logging
from flask import current_app, has_app_context

from babyshop import create_app
from babyshop.extensions import db
from babyshop.models.variation import ProductVariationImage
from babyshop.services import storage_service

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        _worker_app = create_app()
    return _worker_app


def delete_orphaned_media(storage_keys):
    """Delete blobs left behind by an attribute save.

    Enqueued after a replace commits (media of the previous set) or after
    it rolls back (media uploaded for the failed save).

    Idempotency: keys still referenced by a variation image are skipped,
    and deleting a missing object is a no-op on S3.
    """
    app = _get_app()
    with app.app_context():
        if not storage_keys:
            return []

        referenced = {
            key
            for (key,) in db.session.query(ProductVariationImage.storage_key).filter(
                ProductVariationImage.storage_key.in_(storage_keys)
            )
        }
        orphaned = [key for key in storage_keys if key not in referenced]
        if referenced:
            logger.info("Skipping %d media objects still in use", len(referenced))
        if not orphaned:
            return []

        try:
            storage_service.delete_many(orphaned)
        except Exception:
            logger.exception("Failed to delete %d orphaned media objects", len(orphaned))
            raise  # let RQ handle retry

        logger.info("Deleted %d orphaned media objects", len(orphaned))
        return orphaned
