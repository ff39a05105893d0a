import os
import datetime

os.environ.setdefault("TESTING", "true")

import pytest
from fastapi.testclient import TestClient
from biblio.core import db
from biblio.core.api import LibraryAPI, get_library
from biblio.core.auth import create_session_cookie
from biblio.core.inventory import InventoryCoordinator
from biblio.core.members import Members

TODAY = datetime.date(2025, 3, 1)


@pytest.fixture
def engine(tmp_path):
    engine = db.make_engine(f"sqlite:///{tmp_path / 'biblio.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return db.init(engine)


@pytest.fixture
def inventory(session_factory):
    return InventoryCoordinator(session_factory)


@pytest.fixture
def library(session_factory):
    return LibraryAPI(session_factory)


@pytest.fixture
def make_book(inventory):
    def _make_book(title="The Hobbit", copies=1, author="J.R.R. Tolkien"):
        return inventory.create_book(
            title, author, datetime.date(1937, 9, 21), total_copies=copies)
    return _make_book


@pytest.fixture
def make_member(session_factory):
    counter = {"n": 0}

    def _make_member(name="Ada Lovelace", email=None):
        counter["n"] += 1
        email = email or f"reader{counter['n']}@library.org"
        return db.run_in_transaction(
            session_factory, Members.create_member,
            name, email, "5550100", "12 Analytical St")
    return _make_member


@pytest.fixture
def admin_token():
    return create_session_cookie("admin")


@pytest.fixture
def client(library, admin_token):
    from biblio.app import app
    app.dependency_overrides[get_library] = lambda: library
    with TestClient(app) as c:
        c.headers["Authorization"] = f"Bearer {admin_token}"
        yield c
    app.dependency_overrides.clear()
