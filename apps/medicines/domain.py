"""
Medicine records for the pharmacy terminal.

A `Medicine` is a stock-keeping unit held in memory by the inventory
ledger. Records are mutated in place by edits and by sale settlement.
"""
from dataclasses import dataclass, field, fields
from typing import Optional
from datetime import date
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.utils import timezone


def to_decimal(value, field_name="price"):
    """Coerce ints, floats and numeric strings to Decimal."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError({field_name: f"{value!r} is not a valid amount."})


@dataclass
class Medicine:
    """
    Stock-keeping unit.

    `quantity` is units on hand and never drops below zero. `price` is the
    unit sale price used when the medicine is put in a cart.
    """
    id: str
    name: str
    category: str = ""
    batch_number: str = ""
    expiry_date: Optional[date] = None
    quantity: int = 0
    price: Decimal = field(default_factory=Decimal)
    low_stock_threshold: int = 10
    manufacturer: str = ""

    def __post_init__(self):
        self.price = to_decimal(self.price)
        self.clean()

    def clean(self):
        errors = {}
        if not self.name:
            errors["name"] = "Name is required."
        if self.quantity is None or int(self.quantity) < 0:
            errors["quantity"] = "Quantity must be non-negative."
        if self.price < 0:
            errors["price"] = "Price must be non-negative."
        if self.low_stock_threshold is None or int(self.low_stock_threshold) < 0:
            errors["lowStockThreshold"] = "Low stock threshold must be non-negative."
        if errors:
            raise ValidationError(errors)

    @classmethod
    def field_names(cls):
        return {f.name for f in fields(cls)}

    def is_low_stock(self):
        return self.quantity <= self.low_stock_threshold

    def is_expired(self, as_of=None):
        """Check if medicine has expired. Undated stock never expires."""
        if not self.expiry_date:
            return False
        as_of = as_of or timezone.localdate()
        return self.expiry_date < as_of

    @property
    def stock_value(self):
        return self.price * self.quantity

    def __str__(self):
        return f"{self.name} ({self.batch_number})"
