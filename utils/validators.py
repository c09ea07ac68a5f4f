import re
from typing import Any, Dict, Mapping, Optional

import contract
from exceptions import ValidationError

_PHONE_RE = re.compile(r"^\+?[0-9][0-9 ()\-]*$")
# Largest value an SQLite INTEGER column can hold
MAX_INTEGER = 2**63 - 1


class TextValidator:
    """Required text fields: present, not None, not blank."""

    @staticmethod
    def clean(field: str, value: Any) -> str:
        if value is None:
            raise ValidationError(field, f"Book requires a {field}")
        if not isinstance(value, str):
            raise ValidationError(field, f"{field} must be text")
        text = value.strip()
        if not text:
            raise ValidationError(field, f"Book requires a {field}")
        return text


class NumberValidator:
    """Non-negative integers. Form input arrives as text, so digit strings are accepted."""

    @staticmethod
    def to_int(value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(value) if value.is_integer() else None
        if isinstance(value, str):
            s = value.strip()
            if re.fullmatch(r"[+-]?\d+", s):
                return int(s)
        return None

    @staticmethod
    def clean(field: str, value: Any) -> int:
        number = NumberValidator.to_int(value)
        if number is None:
            raise ValidationError(field, f"Book requires valid {field}")
        if number < 0:
            raise ValidationError(field, f"{field} must not be negative")
        if number > MAX_INTEGER:
            raise ValidationError(field, f"{field} is too large")
        return number


class PhoneValidator:
    """Supplier phone numbers, given as text or as an integer."""

    @staticmethod
    def clean(field: str, value: Any) -> str:
        if value is None or isinstance(value, bool):
            raise ValidationError(field, "Book requires a supplier phone number")
        if isinstance(value, int):
            if value < 0:
                raise ValidationError(field, "Invalid supplier phone number")
            return str(value)
        if not isinstance(value, str):
            raise ValidationError(field, "Invalid supplier phone number")
        phone = value.strip()
        if not phone:
            raise ValidationError(field, "Book requires a supplier phone number")
        if not _PHONE_RE.match(phone):
            raise ValidationError(field, "Invalid supplier phone number")
        return phone


_CLEANERS = {
    contract.COLUMN_NAME: TextValidator.clean,
    contract.COLUMN_AUTHOR: TextValidator.clean,
    contract.COLUMN_PRICE: NumberValidator.clean,
    contract.COLUMN_QUANTITY: NumberValidator.clean,
    contract.COLUMN_SUPPLIER_NAME: TextValidator.clean,
    contract.COLUMN_SUPPLIER_PHONE: PhoneValidator.clean,
}


class BookValidator:
    """Checks a set of column values before it reaches the database."""

    @staticmethod
    def _check_keys(values: Mapping[str, Any]) -> None:
        for key in values:
            if key == contract.COLUMN_ID:
                raise ValidationError(key, "id is assigned by the store and cannot be written")
            if key not in _CLEANERS:
                raise ValidationError(key, f"Unknown field: {key}")

    @staticmethod
    def validate_insert(values: Mapping[str, Any]) -> Dict[str, Any]:
        """Every writable column must be present and valid."""
        BookValidator._check_keys(values)
        return {
            column: _CLEANERS[column](column, values.get(column))
            for column in contract.WRITABLE_COLUMNS
        }

    @staticmethod
    def validate_update(values: Mapping[str, Any]) -> Dict[str, Any]:
        """Only the columns present are checked; the rest stay untouched."""
        BookValidator._check_keys(values)
        return {column: _CLEANERS[column](column, value) for column, value in values.items()}
