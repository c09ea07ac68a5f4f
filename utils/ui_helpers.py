import os
import json
from typing import List, Any
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKSTORE_CLI_OUTPUT"

_console = Console()

def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode

def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()

def print_list_result(summaries: List[Any]) -> None:
    """Print catalog rows in the current output mode.
    - plain: 'id - Name by Author | qty N | price' lines, or 'No books in inventory.'
    - json: JSON array of the summary fields
    - rich: Rich table
    """
    mode = get_output_mode()

    if not summaries:
        print("No books in inventory.")
        return

    if mode == "json":
        print(json.dumps([s.to_dict() for s in summaries], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Inventory", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Author", style="white")
        table.add_column("Quantity", justify="right")
        table.add_column("Price", justify="right", style="green")
        for s in summaries:
            table.add_row(str(s.id), s.name, s.author, str(s.quantity), s.price)
        _console.print(table)
    else:
        for s in summaries:
            print(f"{s.id} - {s.name} by {s.author} | qty {s.quantity} | {s.price}")

def print_book_detail(book: Any, price_display: str) -> None:
    """Print every field of one book."""
    mode = get_output_mode()

    if mode == "json":
        payload = book.to_dict()
        payload["price_display"] = price_display
        print(json.dumps(payload, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Author:[/] {book.author}\n"
            f"[bold]Price:[/] {price_display}\n"
            f"[bold]Quantity:[/] {book.quantity}\n"
            f"[bold]Supplier:[/] {book.supplier_name} ({book.supplier_phone})"
        )
        _console.print(Panel.fit(content, title=f"📖 {book.name} #{book.id}", border_style="blue"))
    else:
        print("Book Found")
        print(f"ID: {book.id}")
        print(f"Name: {book.name}")
        print(f"Author: {book.author}")
        print(f"Price: {price_display}")
        print(f"Quantity: {book.quantity}")
        print(f"Supplier: {book.supplier_name}")
        print(f"Supplier phone: {book.supplier_phone}")
