"""
In-memory inventory ledger.

The ledger is the single owner of live `Medicine` records and the source
of truth for stock levels. Iteration order is insertion order.
"""
import logging
import random
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ValidationError

from apps.medicines.domain import Medicine, to_decimal
from apps.terminal.exceptions import NotFoundError, OversellWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockAdjustment:
    """Outcome of a single stock deduction."""
    medicine_id: str
    name: str
    previous: int
    requested: int
    applied: int
    resulting: int

    @property
    def clamped(self):
        return self.applied < self.requested

    def as_warning(self):
        if not self.clamped:
            return None
        return OversellWarning(self.medicine_id, self.name, self.requested, self.previous)

    def as_dict(self):
        return {
            "medicineId": self.medicine_id,
            "name": self.name,
            "previous": self.previous,
            "requested": self.requested,
            "applied": self.applied,
            "resulting": self.resulting,
            "clamped": self.clamped,
        }


class InventoryLedger:
    READ_ONLY_FIELDS = {"id"}

    def __init__(self, medicines=()):
        self._medicines = {}
        for medicine in medicines:
            self._medicines[medicine.id] = medicine

    def __len__(self):
        return len(self._medicines)

    def __iter__(self):
        return iter(list(self._medicines.values()))

    def __contains__(self, medicine_id):
        return medicine_id in self._medicines

    def all(self):
        return list(self._medicines.values())

    def get(self, medicine_id):
        try:
            return self._medicines[medicine_id]
        except KeyError:
            raise NotFoundError(medicine_id) from None

    def find(self, medicine_id):
        return self._medicines.get(medicine_id)

    def _new_id(self):
        medicine_id = uuid.uuid4().hex
        while medicine_id in self._medicines:
            medicine_id = uuid.uuid4().hex
        return medicine_id

    @staticmethod
    def generate_batch_number():
        return f"BAT-{random.randint(100, 999)}"

    def add(self, **data):
        """
        Create a medicine from field values and append it to the ledger.

        Any `id` in `data` is ignored; a fresh one is assigned. A batch
        number is generated when none is supplied.
        """
        data.pop("id", None)
        data.setdefault("low_stock_threshold", settings.DEFAULT_LOW_STOCK_THRESHOLD)
        if not data.get("batch_number"):
            data["batch_number"] = self.generate_batch_number()
        self._check_fields(data)

        medicine = Medicine(id=self._new_id(), **data)
        self._medicines[medicine.id] = medicine
        logger.info("Added medicine %s (%s) with %s units", medicine.id, medicine.name, medicine.quantity)
        return medicine

    def update(self, medicine_id, **changes):
        """
        Merge `changes` into an existing record. Absent fields are kept.
        """
        medicine = self.get(medicine_id)
        self._check_fields(changes)
        blocked = self.READ_ONLY_FIELDS & set(changes)
        if blocked:
            raise ValidationError({name: "This field cannot be changed." for name in blocked})

        if "price" in changes:
            changes["price"] = to_decimal(changes["price"])

        previous = {name: getattr(medicine, name) for name in changes}
        try:
            for name, value in changes.items():
                setattr(medicine, name, value)
            medicine.clean()
        except ValidationError:
            for name, value in previous.items():
                setattr(medicine, name, value)
            raise

        logger.info("Updated medicine %s: %s", medicine_id, ", ".join(sorted(changes)))
        return medicine

    def remove(self, medicine_id):
        medicine = self.get(medicine_id)
        del self._medicines[medicine_id]
        logger.info("Removed medicine %s (%s)", medicine_id, medicine.name)
        return medicine

    def decrement(self, medicine_id, amount):
        """
        Reduce stock by `amount`, never below zero.

        Returns a `StockAdjustment`; its `clamped` flag is set when the
        request exceeded the units on hand.
        """
        medicine = self.get(medicine_id)
        amount = int(amount)
        if amount < 0:
            raise ValidationError({"amount": "Decrement amount must be non-negative."})

        previous = medicine.quantity
        medicine.quantity = max(0, previous - amount)
        adjustment = StockAdjustment(
            medicine_id=medicine.id,
            name=medicine.name,
            previous=previous,
            requested=amount,
            applied=previous - medicine.quantity,
            resulting=medicine.quantity,
        )
        if adjustment.clamped:
            logger.warning(
                "Oversell on %s (%s): requested %s, only %s in stock; clamped to zero",
                medicine.id,
                medicine.name,
                amount,
                previous,
            )
        return adjustment

    def find_low_stock(self):
        return [m for m in self._medicines.values() if m.is_low_stock()]

    def find_expired(self, as_of=None):
        return [m for m in self._medicines.values() if m.is_expired(as_of)]

    def search(self, term=""):
        """
        Case-insensitive substring match on name or category.

        Each call returns a fresh generator over the current records.
        """
        needle = (term or "").lower()
        return (
            m for m in list(self._medicines.values())
            if needle in m.name.lower() or needle in (m.category or "").lower()
        )

    def available(self, term=""):
        return (m for m in self.search(term) if m.quantity > 0)

    def _check_fields(self, data):
        unknown = set(data) - Medicine.field_names()
        if unknown:
            raise ValidationError({name: "Unknown medicine field." for name in sorted(unknown)})
