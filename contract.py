"""Names, addresses and MIME types shared by the store and its callers.

A book is addressed either through the whole collection or as a single
member of it:

    content://<authority>/books       -> Collection
    content://<authority>/books/<id>  -> Item(id)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from config import settings
from exceptions import InvalidQuery

CONTENT_AUTHORITY = settings.content_authority
SCHEME = "content"
BASE_CONTENT_URI = f"{SCHEME}://{CONTENT_AUTHORITY}"
PATH_BOOKS = "books"

TABLE_NAME = "books"

COLUMN_ID = "id"
COLUMN_NAME = "name"
COLUMN_AUTHOR = "author"
COLUMN_PRICE = "price"
COLUMN_QUANTITY = "quantity"
COLUMN_SUPPLIER_NAME = "supplier_name"
COLUMN_SUPPLIER_PHONE = "supplier_phone"

ALL_COLUMNS = (
    COLUMN_ID,
    COLUMN_NAME,
    COLUMN_AUTHOR,
    COLUMN_PRICE,
    COLUMN_QUANTITY,
    COLUMN_SUPPLIER_NAME,
    COLUMN_SUPPLIER_PHONE,
)
# Columns a caller may write; id is assigned by the store.
WRITABLE_COLUMNS = ALL_COLUMNS[1:]

CONTENT_LIST_TYPE = f"vnd.{SCHEME}.dir/{CONTENT_AUTHORITY}/{PATH_BOOKS}"
CONTENT_ITEM_TYPE = f"vnd.{SCHEME}.item/{CONTENT_AUTHORITY}/{PATH_BOOKS}"


@dataclass(frozen=True)
class Collection:
    """Every book in the store."""

    @property
    def uri(self) -> str:
        return f"{BASE_CONTENT_URI}/{PATH_BOOKS}"

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class Item:
    """One book, by id."""

    id: int

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id < 0:
            raise InvalidQuery(f"Invalid book id: {self.id!r}")

    @property
    def uri(self) -> str:
        return f"{BASE_CONTENT_URI}/{PATH_BOOKS}/{self.id}"

    def __str__(self) -> str:
        return self.uri


Address = Union[Collection, Item]

COLLECTION = Collection()


def parse_uri(uri: str) -> Address:
    """Turn a content URI into an address. Raises InvalidQuery for anything else."""
    if not isinstance(uri, str):
        raise InvalidQuery(f"Unknown URI {uri!r}")
    prefix = f"{BASE_CONTENT_URI}/{PATH_BOOKS}"
    if uri.rstrip("/") == prefix:
        return COLLECTION
    if uri.startswith(prefix + "/"):
        tail = uri[len(prefix) + 1:]
        if tail.isdigit():
            return Item(int(tail))
    raise InvalidQuery(f"Unknown URI {uri}")


def resolve(target: Address | int | str) -> Address:
    """Accept an address, a bare id or a URI string."""
    if isinstance(target, (Collection, Item)):
        return target
    if isinstance(target, bool):
        raise InvalidQuery(f"Unknown address {target!r}")
    if isinstance(target, int):
        return Item(target)
    if isinstance(target, str):
        return parse_uri(target)
    raise InvalidQuery(f"Unknown address {target!r}")


def mime_type(address: Address) -> str:
    if isinstance(address, Collection):
        return CONTENT_LIST_TYPE
    if isinstance(address, Item):
        return CONTENT_ITEM_TYPE
    raise InvalidQuery(f"Unknown address {address!r}")
