"""Tests for the orphaned media cleanup job."""
from decimal import Decimal
from unittest.mock import patch

from babyshop.models.variation import ProductVariation, ProductVariationImage


def test_cleanup_skips_referenced_keys(app, db, product):
    variation = ProductVariation(
        product_id=product.id, price=Decimal("850"), stock=1, is_default=True
    )
    db.session.add(variation)
    db.session.flush()
    db.session.add(
        ProductVariationImage(
            variation_id=variation.id,
            image_url="https://cdn.example.test/product-variations/keep.jpg",
            storage_key="product-variations/keep.jpg",
            is_primary=True,
        )
    )
    db.session.commit()

    with patch("babyshop.workers.media_cleanup.storage_service") as mock_storage:
        from babyshop.workers.media_cleanup import delete_orphaned_media

        deleted = delete_orphaned_media(
            ["product-variations/keep.jpg", "product-variations/gone.jpg"]
        )

    assert deleted == ["product-variations/gone.jpg"]
    mock_storage.delete_many.assert_called_once_with(["product-variations/gone.jpg"])


def test_cleanup_noop_when_nothing_orphaned(app, db):
    with patch("babyshop.workers.media_cleanup.storage_service") as mock_storage:
        from babyshop.workers.media_cleanup import delete_orphaned_media

        assert delete_orphaned_media([]) == []
        mock_storage.delete_many.assert_not_called()


def test_dummy_queue_runs_jobs_inline(app, db):
    from babyshop.extensions import DummyQueue

    with patch("babyshop.workers.media_cleanup.storage_service") as mock_storage:
        DummyQueue().enqueue(
            "babyshop.workers.media_cleanup.delete_orphaned_media",
            ["product-variations/old.jpg"],
            retry=object(),
        )

    mock_storage.delete_many.assert_called_once_with(["product-variations/old.jpg"])


def test_dummy_queue_logs_failures(app, db):
    from babyshop.extensions import DummyQueue

    with patch("babyshop.workers.media_cleanup.storage_service") as mock_storage:
        mock_storage.delete_many.side_effect = RuntimeError("S3 down")
        # Must not raise into the caller
        assert DummyQueue().enqueue(
            "babyshop.workers.media_cleanup.delete_orphaned_media",
            ["product-variations/old.jpg"],
        ) is None
