import pytest

from catalog import Catalog
from store import BookStore


@pytest.fixture
def db_file(tmp_path, request):
    # A separate database file for every test
    return str(tmp_path / f"test_{request.node.name}.db")


@pytest.fixture
def store(db_file):
    return BookStore(db_file=db_file)


@pytest.fixture
def catalog(store):
    return Catalog(store)


@pytest.fixture
def neverland():
    return {
        "name": "Neverland",
        "author": "J.M. Barrie",
        "price": 12,
        "quantity": 3,
        "supplier_name": "Acme",
        "supplier_phone": "5551234",
    }
