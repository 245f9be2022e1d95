"""
Sale records.

`SaleItem` snapshots a medicine's name and unit price when it is put in
a cart. `Sale` is the frozen invoice produced at settlement; its total is
computed once and never re-derived from live medicine prices.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from apps.medicines.domain import to_decimal


@dataclass(frozen=True)
class SaleItem:
    medicine_id: str
    name: str
    quantity: int
    price_at_sale: Decimal

    def __post_init__(self):
        object.__setattr__(self, "price_at_sale", to_decimal(self.price_at_sale, "priceAtSale"))

    @property
    def line_total(self):
        return self.quantity * self.price_at_sale

    def with_quantity(self, quantity):
        return replace(self, quantity=quantity)


@dataclass(frozen=True)
class Sale:
    id: str
    timestamp: datetime
    items: tuple = field(default_factory=tuple)
    total_amount: Decimal = Decimal("0")
    customer_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "total_amount", to_decimal(self.total_amount, "totalAmount"))

    @property
    def subtotal(self):
        """Sum of line totals at the frozen sale prices."""
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def discount_amount(self):
        return max(self.subtotal - self.total_amount, Decimal("0"))

    @property
    def items_count(self):
        return sum(item.quantity for item in self.items)

    def __str__(self):
        return f"Sale {self.id} - {self.timestamp:%Y-%m-%d %H:%M} - {self.total_amount}"
