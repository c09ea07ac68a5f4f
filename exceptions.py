from typing import Any


class BookStoreError(Exception):
    """Base exception for the bookstore data layer."""

    def __init__(
        self, error_code: str, message: str, details: Any | None = None
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ValidationError(BookStoreError):
    """A field failed validation. Raised before anything is written."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        message = message or f"Book requires a valid {field}"
        super().__init__(
            error_code="VALIDATION_ERROR", message=message, details={"field": field}
        )


class InvalidQuery(BookStoreError):
    """Malformed address, filter or sort order."""

    def __init__(self, message: str | None = None, details: Any | None = None) -> None:
        message = message or "Invalid query"
        super().__init__(error_code="INVALID_QUERY", message=message, details=details)


class StorageError(BookStoreError):
    """The storage engine failed; the operation was rolled back."""

    def __init__(self, message: str | None = None, details: Any | None = None) -> None:
        message = message or "Error working with the database"
        super().__init__(error_code="STORAGE_ERROR", message=message, details=details)


class BookNotFoundError(BookStoreError, LookupError):
    """No book with the given id."""

    def __init__(self, book_id: int, message: str | None = None) -> None:
        self.book_id = book_id
        message = message or f"Book with id {book_id} not found."
        super().__init__(error_code="BOOK_NOT_FOUND", message=message)
