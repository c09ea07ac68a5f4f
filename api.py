import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import FastAPI, HTTPException, Query, Depends, Security, Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

import contract
from book import Book
from catalog import Catalog
from config import settings
from exceptions import BookNotFoundError, InvalidQuery, StorageError, ValidationError
from store import BookStore

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

store = BookStore()
catalog = Catalog(store)

app = FastAPI(title=settings.app_name, version=settings.app_version)

# --- Error mapping ---
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": {"field": exc.field, "message": exc.message}})

@app.exception_handler(InvalidQuery)
async def invalid_query_handler(request: Request, exc: InvalidQuery):
    return JSONResponse(status_code=400, content={"detail": exc.message})

@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Storage error"})

# --- Security ---
api_key_header = APIKeyHeader(name="X-API-Key")

def get_api_key(api_key: str = Security(api_key_header)):
    """Dependency that checks the API key."""
    if api_key == settings.api_key:
        return api_key
    raise HTTPException(status_code=403, detail="Could not validate credentials")

# --- Models ---
class BookModel(BaseModel):
    id: int
    name: str
    author: str
    price: int
    quantity: int
    supplier_name: str
    supplier_phone: str

class BookCreateModel(BaseModel):
    name: Optional[str] = None
    author: Optional[str] = None
    price: Optional[int] = None
    quantity: Optional[int] = None
    supplier_name: Optional[str] = None
    supplier_phone: Optional[Union[str, int]] = None

class BookUpdateModel(BaseModel):
    name: Optional[str] = None
    author: Optional[str] = None
    price: Optional[int] = None
    quantity: Optional[int] = None
    supplier_name: Optional[str] = None
    supplier_phone: Optional[Union[str, int]] = None

class BookSummaryModel(BaseModel):
    id: int
    name: str
    author: str
    quantity: int
    price: str = Field(description="Display price with currency suffix")

class SaleModel(BaseModel):
    id: int
    sold: bool
    quantity: int

def _to_model(book: Book) -> BookModel:
    return BookModel(**book.to_dict())

# --- Health check ---
@app.get("/health")
def health():
    """Lightweight health endpoint: tries the database and reports the book count."""
    db_ok = True
    total_books = 0
    try:
        total_books = len(store.list())
    except StorageError:
        db_ok = False
    return {
        "status": "healthy" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": total_books,
        "db": db_ok,
    }

# --- Books ---
@app.get("/books", response_model=List[BookModel])
def get_books(
    response: Response,
    supplier_name: Optional[str] = Query(None, description="Only books from this supplier"),
    in_stock: Optional[bool] = Query(None, description="true: quantity > 0, false: quantity = 0"),
    sort_by: str = Query(contract.COLUMN_ID, description="Sort field: id|name|author|price|quantity"),
    order: str = Query("asc", description="Sort order: asc|desc"),
):
    """List books with optional supplier/stock filters and sorting."""
    allowed_sort = {contract.COLUMN_ID, contract.COLUMN_NAME, contract.COLUMN_AUTHOR,
                    contract.COLUMN_PRICE, contract.COLUMN_QUANTITY}
    if sort_by not in allowed_sort:
        raise HTTPException(status_code=400, detail="Invalid sort_by. Allowed: id, name, author, price, quantity")
    if order not in {"asc", "desc"}:
        raise HTTPException(status_code=400, detail="Invalid order. Allowed: asc, desc")

    clauses: List[str] = []
    args: List[object] = []
    if supplier_name:
        clauses.append(f"{contract.COLUMN_SUPPLIER_NAME} = ?")
        args.append(supplier_name)
    if in_stock is not None:
        clauses.append(f"{contract.COLUMN_QUANTITY} {'>' if in_stock else '='} 0")
    selection = " AND ".join(clauses) or None

    books = store.list(contract.COLLECTION, selection, args, f"{sort_by} {order.upper()}")
    response.headers["X-Total-Count"] = str(len(books))
    return [_to_model(b) for b in books]

@app.get("/books/summary", response_model=List[BookSummaryModel])
def get_book_summaries():
    """Rows for the inventory list: id, name, author, quantity and display price."""
    return [BookSummaryModel(**s.to_dict()) for s in catalog.summaries()]

@app.get("/books/{book_id}", response_model=BookModel)
def get_book(book_id: int):
    """Get a single book by id."""
    book = store.get_one(book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found.")
    return _to_model(book)

@app.post("/books", response_model=BookModel, status_code=201, dependencies=[Depends(get_api_key)])
def add_book(payload: BookCreateModel):
    """Add a new book. Every field is required; missing ones are reported by name."""
    book_id = store.insert(payload.model_dump())
    return _to_model(store.get_one(book_id))

@app.patch("/books/{book_id}", response_model=BookModel, dependencies=[Depends(get_api_key)])
def update_book(book_id: int, update: BookUpdateModel):
    """Update the given fields of a book."""
    values = update.model_dump(exclude_unset=True)
    if not values:
        raise HTTPException(status_code=400, detail="Provide at least one field to update.")
    if not store.update(book_id, values):
        raise HTTPException(status_code=404, detail="Book not found.")
    return _to_model(store.get_one(book_id))

@app.delete("/books/{book_id}", dependencies=[Depends(get_api_key)])
def delete_book(book_id: int):
    """Delete a book by id."""
    if not store.delete(book_id):
        raise HTTPException(status_code=404, detail="Book not found.")
    return {"message": "Book removed."}

@app.delete("/books", dependencies=[Depends(get_api_key)])
def delete_all_books():
    """Delete every book."""
    return {"deleted": catalog.delete_all()}

@app.post("/books/{book_id}/sell", response_model=SaleModel, dependencies=[Depends(get_api_key)])
def sell_book(book_id: int):
    """Sell one unit. Out-of-stock books are left unchanged."""
    try:
        sale = catalog.sell_one(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=404, detail="Book not found.")
    return SaleModel(id=book_id, sold=sale.sold, quantity=sale.remaining)
