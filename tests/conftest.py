import io

import pytest
from PIL import Image as PILImage
from werkzeug.datastructures import FileStorage

from storefront import create_app
from storefront.errors import StorageError
from storefront.extensions import db as _db
from storefront.models.category import Category
from storefront.models.user import User
from storefront.services import product_service, storage_service


@pytest.fixture
def app():
    """Create application for testing, with a fresh in-memory schema."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def admin_headers(app):
    return {"X-Admin-Token": app.config["ADMIN_API_TOKEN"]}


class FakeStorage:
    """Stands in for the S3 collaborator; records uploads and deletes."""

    def __init__(self):
        self.uploaded = []
        self.deleted = []
        self.fail_upload = False

    def upload_files(self, payloads, folder=None):
        if self.fail_upload:
            raise StorageError("Object storage upload failed")
        start = len(self.uploaded)
        urls = [
            f"https://cdn.example.test/products/img{start + i}.jpg"
            for i in range(len(payloads))
        ]
        self.uploaded.extend(urls)
        return urls

    def delete_by_urls(self, urls):
        self.deleted.extend(urls)


@pytest.fixture
def storage(monkeypatch):
    fake = FakeStorage()
    monkeypatch.setattr(storage_service, "upload_files", fake.upload_files)
    monkeypatch.setattr(storage_service, "delete_by_urls", fake.delete_by_urls)
    return fake


def image_bytes(fmt="PNG", size=(8, 8), color=(200, 30, 30)):
    buffer = io.BytesIO()
    PILImage.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_upload():
    def _make(filename="photo.png", data=None):
        return FileStorage(
            stream=io.BytesIO(data if data is not None else image_bytes()),
            filename=filename,
            content_type="image/png",
        )

    return _make


@pytest.fixture
def category(db):
    c = Category(name="Apparel")
    db.session.add(c)
    db.session.commit()
    return c


@pytest.fixture
def user(db):
    u = User(email="buyer@example.test")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def other_user(db):
    u = User(email="other@example.test")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture
def make_standalone(category):
    def _make(**overrides):
        data = {
            "title": "Shirt",
            "name": "shirt",
            "quantity": 5,
            "category_id": category.id,
            "product_type": "STANDALONE",
            "sizes": [{"size": "S", "price": 20}, {"size": "M", "price": 25}],
            "colors": [{"color": "Red"}, {"color": "Blue"}],
        }
        data.update(overrides)
        return product_service.create_base(data)

    return _make


@pytest.fixture
def make_variant_family(category):
    """VARIANT_BASED base with one variant per (size, quantity, price)."""

    def _make(variants=(("9", 3, 50),), title="Shoe"):
        base = product_service.create_base(
            {
                "title": title,
                "name": title.lower(),
                "quantity": 0,
                "category_id": category.id,
                "product_type": "VARIANT_BASED",
            }
        )
        children = [
            product_service.create_variant(
                base.id,
                {
                    "title": f"{title} - {size}",
                    "name": f"{title.lower()}-{size}",
                    "quantity": quantity,
                    "size": size,
                    "price": price,
                },
            )
            for size, quantity, price in variants
        ]
        return base, children

    return _make
