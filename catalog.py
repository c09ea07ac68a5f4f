"""Inventory actions built on top of the store: summaries, pricing, selling."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

import contract
from book import Book
from config import settings
from contract import COLLECTION, Item
from exceptions import BookNotFoundError
from notifications import Observer
from store import BookStore

logger = logging.getLogger(__name__)

# Record inserted by the "sample data" action.
SAMPLE_BOOK = {
    contract.COLUMN_NAME: "Neverland",
    contract.COLUMN_AUTHOR: "J.M. Barrie",
    contract.COLUMN_PRICE: 12,
    contract.COLUMN_QUANTITY: 3,
    contract.COLUMN_SUPPLIER_NAME: "Acme",
    contract.COLUMN_SUPPLIER_PHONE: "5551234",
}


def format_price(price: float, currency: Optional[str] = None) -> str:
    """Render a price: whole amounts without decimals ("10€"), others as-is ("9.5€")."""
    suffix = settings.currency_symbol if currency is None else currency
    value = float(price)
    if value.is_integer():
        return f"{int(value)}{suffix}"
    return f"{value}{suffix}"


@dataclass
class BookSummary:
    """The fields a list row shows for one book."""

    id: int
    name: str
    author: str
    quantity: int
    price: str

    @classmethod
    def from_book(cls, book: Book, currency: Optional[str] = None) -> "BookSummary":
        return cls(
            id=book.id,
            name=book.name,
            author=book.author,
            quantity=book.quantity,
            price=format_price(book.price, currency),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Sale:
    """Outcome of selling one unit. ``book`` is the record as it was before the sale."""

    book: Book
    sold: bool
    remaining: int


class Catalog:
    """Caller-side inventory operations. Owns no persistence of its own."""

    def __init__(self, store: Optional[BookStore] = None) -> None:
        self.store = store or BookStore()

    def summaries(self, sort_order: Optional[str] = f"{contract.COLUMN_ID} ASC") -> List[BookSummary]:
        return [BookSummary.from_book(b) for b in self.store.list(COLLECTION, sort_order=sort_order)]

    def sell_one(self, book_id: int) -> Sale:
        """Sell a single unit. Returns whether a unit was sold and the quantity left.

        Out-of-stock books are left alone: the store is not written to and no
        change is signalled.
        """
        book = self.store.get_one(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        if book.quantity <= 0:
            logger.info("Book %d is out of stock, nothing sold", book_id)
            return Sale(book=book, sold=False, remaining=0)

        remaining = book.quantity - 1
        self.store.update(Item(book_id), {contract.COLUMN_QUANTITY: remaining})
        return Sale(book=book, sold=True, remaining=remaining)

    def insert_sample_book(self) -> int:
        return self.store.insert(dict(SAMPLE_BOOK))

    def delete_all(self) -> int:
        rows_deleted = self.store.delete(COLLECTION)
        logger.info("%d rows deleted from books database", rows_deleted)
        return rows_deleted

    def watch(self, observer: Observer) -> None:
        """Call ``observer`` whenever anything in the catalog changes."""
        self.store.register_observer(COLLECTION, observer)
