from unittest.mock import MagicMock

import pytest

from catalog import SAMPLE_BOOK, BookSummary, Catalog, format_price
from contract import COLLECTION, Item
from exceptions import BookNotFoundError


@pytest.mark.parametrize("price,expected", [(10, "10€"), (9.5, "9.5€"), (0, "0€"), (12.0, "12€")])
def test_format_price(price, expected):
    assert format_price(price) == expected


def test_format_price_custom_currency():
    assert format_price(3, currency=" USD") == "3 USD"


def test_sell_one_decrements_and_notifies(catalog, neverland):
    book_id = catalog.store.insert({**neverland, "quantity": 5})
    observer = MagicMock()
    catalog.store.register_observer(Item(book_id), observer)

    sale = catalog.sell_one(book_id)
    assert sale.sold is True
    assert sale.remaining == 4
    assert sale.book.quantity == 5

    assert catalog.store.get_one(book_id).quantity == 4
    observer.assert_called_once_with(Item(book_id))


def test_sell_one_out_of_stock_is_noop(catalog, neverland, monkeypatch):
    book_id = catalog.store.insert({**neverland, "quantity": 0})
    update = MagicMock()
    monkeypatch.setattr(catalog.store, "update", update)

    sale = catalog.sell_one(book_id)
    assert sale.sold is False
    assert sale.remaining == 0

    update.assert_not_called()
    assert catalog.store.get_one(book_id).quantity == 0


def test_sell_last_copy_reaches_zero(catalog, neverland):
    book_id = catalog.store.insert({**neverland, "quantity": 1})
    assert catalog.sell_one(book_id).sold is True
    assert catalog.sell_one(book_id).sold is False
    assert catalog.store.get_one(book_id).quantity == 0


def test_sell_one_reads_the_book_once(catalog, neverland, monkeypatch):
    book_id = catalog.store.insert({**neverland, "quantity": 2})
    get_one = MagicMock(wraps=catalog.store.get_one)
    monkeypatch.setattr(catalog.store, "get_one", get_one)

    assert catalog.sell_one(book_id).sold is True
    get_one.assert_called_once_with(book_id)


def test_sell_missing_book(catalog):
    with pytest.raises(BookNotFoundError):
        catalog.sell_one(404)


def test_summaries_show_display_price(catalog, neverland):
    book_id = catalog.store.insert(neverland)

    summaries = catalog.summaries()

    assert summaries == [BookSummary(id=book_id, name="Neverland", author="J.M. Barrie", quantity=3, price="12€")]


def test_insert_sample_book(catalog):
    book_id = catalog.insert_sample_book()
    assert catalog.store.get_one(book_id).to_dict() == {"id": book_id, **SAMPLE_BOOK}


def test_delete_all(catalog, neverland):
    catalog.store.insert(neverland)
    catalog.store.insert(neverland)
    observer = MagicMock()
    catalog.watch(observer)

    assert catalog.delete_all() == 2

    assert catalog.store.list() == []
    observer.assert_called_once_with(COLLECTION)


def test_delete_all_on_empty_store_is_silent(catalog):
    observer = MagicMock()
    catalog.watch(observer)
    assert catalog.delete_all() == 0
    observer.assert_not_called()
