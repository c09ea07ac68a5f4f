import pytest

import contract
from contract import COLLECTION, Collection, Item, parse_uri, resolve
from exceptions import InvalidQuery


def test_collection_uri_round_trip():
    assert COLLECTION.uri == f"content://{contract.CONTENT_AUTHORITY}/books"
    assert parse_uri(COLLECTION.uri) == Collection()
    assert parse_uri(COLLECTION.uri + "/") == COLLECTION


def test_item_uri_round_trip():
    assert Item(7).uri.endswith("/books/7")
    assert parse_uri(Item(7).uri) == Item(7)


@pytest.mark.parametrize("uri", [
    "content://other.authority/books",
    f"content://{contract.CONTENT_AUTHORITY}/authors",
    f"content://{contract.CONTENT_AUTHORITY}/books/abc",
    f"content://{contract.CONTENT_AUTHORITY}/books/1/2",
    "",
])
def test_unknown_uris_are_rejected(uri):
    with pytest.raises(InvalidQuery):
        parse_uri(uri)


def test_resolve_accepts_ids_uris_and_addresses():
    assert resolve(5) == Item(5)
    assert resolve(Item(5).uri) == Item(5)
    assert resolve(COLLECTION) is COLLECTION


@pytest.mark.parametrize("target", [True, 1.5, None, -1])
def test_resolve_rejects_other_values(target):
    with pytest.raises(InvalidQuery):
        resolve(target)


def test_mime_types_differ_per_address():
    assert contract.mime_type(COLLECTION) == contract.CONTENT_LIST_TYPE
    assert contract.mime_type(Item(1)) == contract.CONTENT_ITEM_TYPE
    assert contract.CONTENT_LIST_TYPE != contract.CONTENT_ITEM_TYPE
