from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CartItem:
    """
    One cart line.

    `price` is the unit price captured when the item was added; the cart
    never re-prices. Line identity is (product_id, color, size).
    """
    product_id: str
    name: str
    price: float
    quantity: int = 1
    image: str | None = None
    color: str | None = None
    size: str | None = None

    @property
    def line_key(self) -> tuple[str, str | None, str | None]:
        return (self.product_id, self.color, self.size)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    @classmethod
    def from_dict(cls, data: dict) -> "CartItem":
        return cls(
            product_id=data["productId"],
            name=data.get("name", ""),
            price=data.get("price", 0),
            quantity=int(data.get("quantity", 1)),
            image=data.get("image"),
            color=data.get("color"),
            size=data.get("size"),
        )

    def to_dict(self):
        data = {
            "productId": self.product_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }
        # Optional fields are omitted rather than null, as the browser cart did
        for key, value in (("image", self.image), ("color", self.color), ("size", self.size)):
            if value is not None:
                data[key] = value
        return data
