from __future__ import annotations

import logging
import re
import sqlite3
from typing import Any, List, Mapping, Optional, Sequence, Tuple

import contract
from book import Book
from contract import COLLECTION, Address, Collection, Item
from database import get_database_file, get_db_connection, initialize_database
from exceptions import BookStoreError, InvalidQuery, StorageError
from notifications import ChangeNotifier, Observer
from utils.validators import BookValidator

logger = logging.getLogger(__name__)

Target = Address | int | str

_COLUMN_PATTERN = "|".join(contract.ALL_COLUMNS)
_SORT_TERM = rf"\s*({_COLUMN_PATTERN})(\s+(?i:asc|desc))?\s*"
_SORT_RE = re.compile(rf"^{_SORT_TERM}(,{_SORT_TERM})*$")

# sqlite3 reports a malformed WHERE clause as an OperationalError with one of these.
_MALFORMED_MARKERS = ("no such column", "syntax error", "unrecognized token", "incomplete input")


class BookStore:
    """Single-table store of books, addressed by collection or by item.

    Every mutation that touches at least one row is followed by a change
    notification for the address it was issued against.
    """

    def __init__(self, db_file: Optional[str] = None, notifier: Optional[ChangeNotifier] = None) -> None:
        self.db_file = db_file or get_database_file()
        self.notifier = notifier or ChangeNotifier()
        try:
            initialize_database(self.db_file)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database {self.db_file}: {e}") from e

    # ------------------------- Core operations ------------------------- #
    def list(self, target: Target = COLLECTION, selection: Optional[str] = None,
             selection_args: Sequence[Any] = (), sort_order: Optional[str] = None) -> List[Book]:
        """Return every book matching the address and optional filter."""
        address = contract.resolve(target)
        where, args = self._where(address, selection, selection_args)
        sql = f"SELECT {', '.join(contract.ALL_COLUMNS)} FROM {contract.TABLE_NAME}{where}{self._order_by(sort_order)}"

        conn = self._connect()
        try:
            rows = conn.execute(sql, args).fetchall()
        except sqlite3.Error as e:
            raise self._translate(e) from e
        finally:
            conn.close()
        return [Book.from_dict(dict(row)) for row in rows]

    def get_one(self, book_id: int) -> Optional[Book]:
        """Return the book with ``book_id`` or None."""
        if isinstance(book_id, bool) or not isinstance(book_id, int) or book_id < 0:
            return None
        books = self.list(Item(book_id))
        return books[0] if books else None

    def insert(self, values: Mapping[str, Any], target: Target = COLLECTION) -> int:
        """Validate and insert a new book. Returns its id."""
        address = contract.resolve(target)
        if not isinstance(address, Collection):
            raise InvalidQuery(f"Insertion is not supported for {address}")

        clean = BookValidator.validate_insert(values or {})
        columns = ", ".join(clean)
        placeholders = ", ".join("?" for _ in clean)
        sql = f"INSERT INTO {contract.TABLE_NAME} ({columns}) VALUES ({placeholders})"

        conn = self._connect()
        try:
            cursor = conn.execute(sql, tuple(clean.values()))
            conn.commit()
            new_id = cursor.lastrowid
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Failed to insert row for %s: %s", address, e)
            raise self._translate(e) from e
        finally:
            conn.close()

        logger.info("Inserted book %d (%s)", new_id, clean[contract.COLUMN_NAME])
        self.notifier.notify(address)
        return new_id

    def update(self, target: Target, values: Mapping[str, Any], selection: Optional[str] = None,
               selection_args: Sequence[Any] = ()) -> int:
        """Apply a partial set of column values to every matching row. Returns the row count."""
        address = contract.resolve(target)
        if not values:
            return 0

        clean = BookValidator.validate_update(values)
        where, args = self._where(address, selection, selection_args)
        assignments = ", ".join(f"{column} = ?" for column in clean)
        sql = f"UPDATE {contract.TABLE_NAME} SET {assignments}{where}"

        conn = self._connect()
        try:
            cursor = conn.execute(sql, tuple(clean.values()) + args)
            conn.commit()
            rows_updated = cursor.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Failed to update %s: %s", address, e)
            raise self._translate(e) from e
        finally:
            conn.close()

        if rows_updated:
            logger.debug("Updated %d row(s) at %s", rows_updated, address)
            self.notifier.notify(address)
        return rows_updated

    def delete(self, target: Target, selection: Optional[str] = None, selection_args: Sequence[Any] = ()) -> int:
        """Remove every matching row. Returns the row count."""
        address = contract.resolve(target)
        where, args = self._where(address, selection, selection_args)
        sql = f"DELETE FROM {contract.TABLE_NAME}{where}"

        conn = self._connect()
        try:
            cursor = conn.execute(sql, args)
            conn.commit()
            rows_deleted = cursor.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Failed to delete %s: %s", address, e)
            raise self._translate(e) from e
        finally:
            conn.close()

        if rows_deleted:
            logger.info("Deleted %d row(s) at %s", rows_deleted, address)
            self.notifier.notify(address)
        return rows_deleted

    def get_type(self, target: Target) -> str:
        """MIME type of the data behind an address."""
        return contract.mime_type(contract.resolve(target))

    # ------------------------- Observers ------------------------- #
    def register_observer(self, target: Target, observer: Observer, notify_for_descendants: bool = True) -> None:
        self.notifier.register(contract.resolve(target), observer, notify_for_descendants)

    def unregister_observer(self, observer: Observer) -> int:
        return self.notifier.unregister(observer)

    # ------------------------- Helpers ------------------------- #
    def _connect(self) -> sqlite3.Connection:
        try:
            return get_db_connection(self.db_file)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open database {self.db_file}: {e}") from e

    @staticmethod
    def _where(address: Address, selection: Optional[str], selection_args: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
        if selection is not None and not isinstance(selection, str):
            raise InvalidQuery(f"Selection must be a string, got {type(selection).__name__}")
        if selection and ";" in selection:
            raise InvalidQuery("Selection must be a single expression")
        if isinstance(selection_args, (str, bytes)) or not isinstance(selection_args, (list, tuple)):
            raise InvalidQuery("Selection arguments must be a list or tuple")

        if isinstance(address, Item):
            # An item address names exactly one row; any selection is ignored.
            if selection or selection_args:
                logger.debug("Ignoring selection for item address %s", address)
            return f" WHERE {contract.COLUMN_ID} = ?", (address.id,)

        clauses: List[str] = []
        args: List[Any] = []
        if selection and selection.strip():
            clauses.append(f"({selection})")
            args.extend(selection_args)
        elif selection_args:
            raise InvalidQuery("Selection arguments given without a selection")

        if not clauses:
            return "", ()
        return " WHERE " + " AND ".join(clauses), tuple(args)

    @staticmethod
    def _order_by(sort_order: Optional[str]) -> str:
        if sort_order is None or not sort_order.strip():
            return ""
        if not _SORT_RE.match(sort_order):
            raise InvalidQuery(f"Invalid sort order: {sort_order}")
        return f" ORDER BY {sort_order.strip()}"

    @staticmethod
    def _translate(error: sqlite3.Error) -> BookStoreError:
        message = str(error)
        if isinstance(error, sqlite3.ProgrammingError):
            return InvalidQuery(f"Malformed filter: {message}")
        if isinstance(error, sqlite3.OperationalError) and any(m in message for m in _MALFORMED_MARKERS):
            return InvalidQuery(f"Malformed filter: {message}")
        return StorageError(message)
