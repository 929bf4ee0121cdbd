"""Ingredient value inside a recipe: a name and an optional free-text quantity."""
from typing import Optional


class Ingredient:
    def __init__(self, name: str = "", quantity: Optional[str] = None):
        self.name = name
        self.quantity = quantity or ""

    def __str__(self) -> str:
        return f"{self.name} ({self.quantity})" if self.quantity else self.name

    __repr__ = __str__

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ingredient):
            return NotImplemented
        return self.name == other.name and self.quantity == other.quantity

    @staticmethod
    def from_dict(data):
        '''Creates an Ingredient from a dict or a legacy plain string. Ignores unknown keys.'''
        if isinstance(data, str):
            return Ingredient(data.strip())
        d = data if isinstance(data, dict) else {}
        name = d.get("name")
        quantity = d.get("quantity")
        return Ingredient(
            name.strip() if isinstance(name, str) else "",
            str(quantity).strip() if quantity not in (None, "") else None,
        )

    def to_dict(self):
        '''Converts the Ingredient to a dict for JSON persistence (quantity only when set).'''
        d = {"name": self.name}
        if self.quantity:
            d["quantity"] = self.quantity
        return d
