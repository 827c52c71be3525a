from decimal import Decimal

import pytest
from werkzeug.security import generate_password_hash

from circulation import create_app
from circulation.config import TestConfig
from circulation.extensions import db
from circulation.models.book import Book, BookCopy, Category
from circulation.models.librarian import Librarian
from circulation.models.member import Address, Member


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


def seed_library():
    """Small catalog: book 117 (two copies, 2.00/day), book 105 (one copy), three members, two librarians."""
    category = Category(id=1, name="Programming")
    db.session.add(category)
    db.session.add_all([
        Book(id=117, title="Learning Python", author="Mark Lutz", category_id=1, price_per_day=Decimal("2.00")),
        Book(id=105, title="Tareekh Misr", author="Unknown", category_id=1, price_per_day=Decimal("1.50")),
    ])
    db.session.add_all([
        BookCopy(id=1, book_id=117, serial_number="LP-0001", availability=True),
        BookCopy(id=2, book_id=117, serial_number="LP-0002", availability=True),
        BookCopy(id=3, book_id=105, serial_number="TM-0001", availability=True),
    ])
    address = Address(id=1, street="12 Nile St", city="Cairo", postal_code="11511")
    db.session.add(address)
    db.session.add_all([
        Member(id=1001, fullname="Mostafa Ali", email="mostafa@example.com", address_id=1),
        Member(id=1030, fullname="Sara Adel", email="sara@example.com"),
        Member(id=1037, fullname="Omar Hassan", email="omar@example.com"),
    ])
    db.session.add_all([
        Librarian(id=2005, fullname="Senior Lib", email="senior@library.local",
                  password_hash=generate_password_hash("secret"), role="Senior Librarian"),
        Librarian(id=2001, fullname="First Lib", email="first@library.local",
                  password_hash=generate_password_hash("secret")),
    ])
    db.session.commit()


@pytest.fixture
def library(app):
    seed_library()
    return app


@pytest.fixture
def client(library):
    return library.test_client()


@pytest.fixture
def auth_headers(client):
    resp = client.post("/auth/login", json={"email": "senior@library.local", "password": "secret"})
    assert resp.status_code == 200
    token = resp.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def file_library(tmp_path):
    """Seeded app on a file-backed SQLite database, so threads get separate connections."""

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'circulation.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"check_same_thread": False, "timeout": 30}}
        CONFLICT_RETRY_ATTEMPTS = 25

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        seed_library()
        db.session.remove()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
