import logging
import os
import subprocess
import sys
from typing import Any, Dict, Optional

import typer

import contract
from catalog import Catalog, format_price
from config import settings
from database import get_database_file
from exceptions import BookNotFoundError, InvalidQuery, StorageError, ValidationError
from utils.ui_helpers import set_output_mode, print_list_result, print_book_detail

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

APP_NAME = "Bookstore CLI"


# Single Catalog instance per database file
class CatalogManager:
    _instance: Optional[Catalog] = None
    _db_file_snapshot: Optional[str] = None

    @classmethod
    def get_instance(cls) -> Catalog:
        """Get or create the Catalog for the current database file."""
        current_db = get_database_file()
        if cls._instance is None or current_db != cls._db_file_snapshot:
            cls._instance = Catalog()
            cls._db_file_snapshot = current_db
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None
        cls._db_file_snapshot = None


def _fail(message: str) -> None:
    print(message)
    raise typer.Exit(code=1)


# --- Typer CLI app ---
app = typer.Typer(help=APP_NAME)

@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)

@app.command("list")
def cli_list(
    sort: str = typer.Option(f"{contract.COLUMN_ID} ASC", "--sort", help="Sort order, e.g. 'name ASC, price DESC'"),
):
    """List every book with quantity and price."""
    catalog = CatalogManager.get_instance()
    try:
        summaries = catalog.summaries(sort_order=sort)
    except InvalidQuery as e:
        _fail(f"Error: {e}")
    print_list_result(summaries)

@app.command("show")
def cli_show(book_id: int):
    """Show every field of one book."""
    catalog = CatalogManager.get_instance()
    book = catalog.store.get_one(book_id)
    if not book:
        print(f"Book with id {book_id} not found.")
        return
    print_book_detail(book, format_price(book.price))

@app.command("add")
def cli_add(
    name: str = typer.Option(..., "--name"),
    author: str = typer.Option(..., "--author"),
    price: int = typer.Option(..., "--price"),
    quantity: int = typer.Option(..., "--quantity"),
    supplier_name: str = typer.Option(..., "--supplier-name"),
    supplier_phone: str = typer.Option(..., "--supplier-phone"),
):
    """Add a book to the inventory."""
    catalog = CatalogManager.get_instance()
    values = {
        contract.COLUMN_NAME: name,
        contract.COLUMN_AUTHOR: author,
        contract.COLUMN_PRICE: price,
        contract.COLUMN_QUANTITY: quantity,
        contract.COLUMN_SUPPLIER_NAME: supplier_name,
        contract.COLUMN_SUPPLIER_PHONE: supplier_phone,
    }
    try:
        book_id = catalog.store.insert(values)
    except ValidationError as e:
        _fail(f"Error: {e}")
    except StorageError as e:
        _fail(f"Unexpected error: {e}")
    print(f"Successfully added: {name} by {author} (id {book_id})")

@app.command("edit")
def cli_edit(
    book_id: int,
    name: Optional[str] = typer.Option(None, "--name"),
    author: Optional[str] = typer.Option(None, "--author"),
    price: Optional[int] = typer.Option(None, "--price"),
    quantity: Optional[int] = typer.Option(None, "--quantity"),
    supplier_name: Optional[str] = typer.Option(None, "--supplier-name"),
    supplier_phone: Optional[str] = typer.Option(None, "--supplier-phone"),
):
    """Change some fields of a book; fields not given stay as they are."""
    catalog = CatalogManager.get_instance()
    given: Dict[str, Any] = {
        contract.COLUMN_NAME: name,
        contract.COLUMN_AUTHOR: author,
        contract.COLUMN_PRICE: price,
        contract.COLUMN_QUANTITY: quantity,
        contract.COLUMN_SUPPLIER_NAME: supplier_name,
        contract.COLUMN_SUPPLIER_PHONE: supplier_phone,
    }
    values = {k: v for k, v in given.items() if v is not None}
    if not values:
        print("Nothing to update. Provide at least one field.")
        return
    try:
        updated = catalog.store.update(book_id, values)
    except ValidationError as e:
        _fail(f"Error: {e}")
    if updated:
        print(f"Book with id {book_id} has been updated.")
    else:
        print(f"Book with id {book_id} not found.")

@app.command("sell")
def cli_sell(book_id: int):
    """Sell one unit of a book."""
    catalog = CatalogManager.get_instance()
    try:
        sale = catalog.sell_one(book_id)
    except BookNotFoundError as e:
        print(str(e))
        return
    if sale.sold:
        print(f"Sold one copy. {sale.remaining} left.")
    else:
        print(f"{sale.book.name} is out of stock.")

@app.command("remove")
def cli_remove(book_id: int):
    """Remove a book by id."""
    catalog = CatalogManager.get_instance()
    try:
        removed = catalog.store.delete(book_id)
    except InvalidQuery as e:
        _fail(f"Error: {e}")
    except StorageError as e:
        _fail(f"Unexpected error: {e}")
    if removed:
        print(f"Book with id {book_id} has been removed.")
    else:
        print(f"Book with id {book_id} not found.")

@app.command("clear")
def cli_clear(yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation")):
    """Delete every book in the inventory."""
    if not yes and not typer.confirm("Delete all books?"):
        print("Aborted.")
        return
    catalog = CatalogManager.get_instance()
    print(f"{catalog.delete_all()} books deleted.")

@app.command("seed")
def cli_seed():
    """Insert a sample book."""
    catalog = CatalogManager.get_instance()
    book_id = catalog.insert_sample_book()
    print(f"Sample book inserted with id {book_id}.")

@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
):
    """Start the HTTP API with Uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    print(f"Starting API on http://{host}:{port}/")
    args = [
        sys.executable,
        "-m", "uvicorn",
        "api:app",
        "--host", host,
        "--port", str(port),
    ]
    try:
        subprocess.run(args, env=dict(os.environ, BOOKSTORE_DB_FILE=get_database_file()))
    except KeyboardInterrupt:
        print("Server stopped.")


if __name__ == "__main__":
    app()
