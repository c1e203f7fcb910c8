import io
from decimal import Decimal

import pytest
from PIL import Image as PILImage

from babyshop import create_app
from babyshop import extensions
from babyshop.extensions import db as _db
from babyshop.models.admin_user import AdminUser
from babyshop.models.product import Product

ADMIN_EMAIL = "admin@babyshop.test"


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture
def db(app):
    """Fresh tables per test; services commit, so no savepoint rollback."""
    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture
def client(app, db):
    return app.test_client()


class RecordingQueue:
    def __init__(self):
        self.jobs = []

    def enqueue(self, func, *args, **kwargs):
        self.jobs.append((func, args, kwargs))
        return None

    @property
    def cleaned_keys(self):
        return [key for _, args, _ in self.jobs for key in args[0]]


@pytest.fixture
def queue(monkeypatch):
    recorder = RecordingQueue()
    monkeypatch.setattr(extensions, "task_queue", recorder)
    return recorder


@pytest.fixture
def blob_store(monkeypatch):
    """In-memory stand-in for the S3 calls."""
    from babyshop.services import storage_service

    objects = {}

    def upload(storage_key, data, content_type="image/jpeg"):
        objects[storage_key] = (data, content_type)

    def delete_many(storage_keys):
        for key in storage_keys:
            objects.pop(key, None)

    monkeypatch.setattr(storage_service, "upload", upload)
    monkeypatch.setattr(storage_service, "delete_many", delete_many)
    return objects


@pytest.fixture
def product(db):
    p = Product(
        slug="cotton-romper",
        name="Cotton Romper",
        name_bn="সুতির রম্পার",
        price=Decimal("850.00"),
        status="PUBLISHED",
    )
    db.session.add(p)
    db.session.commit()
    return p


@pytest.fixture
def admin(db):
    user = AdminUser(email=ADMIN_EMAIL, is_admin=True)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_headers(app, admin):
    return {
        "X-Admin-Token": app.config["ADMIN_API_TOKEN"],
        "X-Admin-Email": ADMIN_EMAIL,
    }


def make_png(color=(255, 0, 0), size=(8, 8)):
    buffer = io.BytesIO()
    PILImage.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()
