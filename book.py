from __future__ import annotations


class Book:
    """Represents a single inventory item in the bookstore."""

    def __init__(self, name: str, author: str, price: int, quantity: int,
                 supplier_name: str, supplier_phone: str, id: int | None = None) -> None:
        self.id = id
        self.name = name
        self.author = author
        self.price = price
        self.quantity = quantity
        self.supplier_name = supplier_name
        self.supplier_phone = supplier_phone

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} by {self.author} (id: {self.id})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book({self.to_dict()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "author": self.author,
            "price": self.price,
            "quantity": self.quantity,
            "supplier_name": self.supplier_name,
            "supplier_phone": self.supplier_phone,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        phone = data["supplier_phone"]
        return Book(
            id=data.get("id"),
            name=data["name"],
            author=data["author"],
            price=data["price"],
            quantity=data["quantity"],
            supplier_name=data["supplier_name"],
            # Older rows may hold the phone as an integer
            supplier_phone=str(phone) if phone is not None else None,
        )
