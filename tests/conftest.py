import io
from unittest.mock import MagicMock

import pytest
from PIL import Image as PILImage

from printmarket import create_app
from printmarket import extensions
from printmarket.extensions import db as _db
from printmarket.services import catalog_service, storage_service


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Fresh schema per test so commits and rollbacks behave for real."""
    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture
def blob_store(monkeypatch):
    """Stand-in for the S3 upload; records every call."""

    def fake_upload(vendor_id, digest, data, content_type, extension):
        key = storage_service.design_key(vendor_id, digest, extension)
        return f"https://cdn.test/{key}", key

    upload = MagicMock(side_effect=fake_upload)
    monkeypatch.setattr(storage_service, "upload_design", upload)
    return upload


@pytest.fixture
def blob_delete(monkeypatch):
    """Stand-in for the S3 delete."""
    delete = MagicMock(return_value=None)
    monkeypatch.setattr(storage_service, "delete", delete)
    return delete


@pytest.fixture
def catalog(monkeypatch):
    get_base_product = MagicMock(
        return_value={
            "name": "Classic Tee",
            "price": 1500,
            "images": ["https://cdn.test/base/tee-front.jpg"],
            "sizes": ["S", "M", "L"],
        }
    )
    monkeypatch.setattr(catalog_service, "get_base_product", get_base_product)
    return get_base_product


@pytest.fixture
def queue(monkeypatch):
    fake = MagicMock()
    monkeypatch.setattr(extensions, "task_queue", fake)
    return fake


def make_png(color=(200, 30, 30), size=(16, 16)):
    buffer = io.BytesIO()
    PILImage.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def artwork():
    return make_png()


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def make_product(db, blob_store, catalog, queue):
    """Create a vendor product through the service with sensible defaults."""
    from printmarket.services import vendor_product_service

    def _make(vendor_id=5, design_bytes=None, design_id=None, action="AUTO_PUBLISH", **fields):
        if design_bytes is None and design_id is None:
            design_bytes = make_png()
        fields.setdefault("name", "Glitch Tee")
        fields.setdefault("price", 2500)
        return vendor_product_service.create_product(
            vendor_id=vendor_id,
            base_product_id=fields.pop("base_product_id", 42),
            design_bytes=design_bytes,
            design_id=design_id,
            post_validation_action=action,
            **fields,
        )

    return _make
