"""
Sales transaction services.

The transaction engine owns the checkout cart, prices it, and settles it
into an immutable `Sale` while deducting stock from the inventory ledger.
Pricing is re-derived from the cart on every read.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from django.conf import settings
from django.utils import timezone

from apps.terminal.exceptions import EmptyCartError, NotFoundError, OversellError, OversellWarning
from .domain import Sale, SaleItem
from .receipts import Receipt

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def parse_amount(value):
    """
    Read an optional amount typed by the operator.

    Blank, missing and non-numeric input all resolve to None.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    text = str(value).strip()
    if not text:
        return None
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def resolve_discount_percent(value):
    """Discounts only reduce the price: clamp to the 0-100 range."""
    percent = parse_amount(value)
    if percent is None or percent < 0:
        return ZERO
    return min(percent, HUNDRED)


def resolve_customer_name(name):
    name = (name or "").strip()
    return name or settings.WALK_IN_CUSTOMER


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    grand_total: Decimal
    cash_received: Optional[Decimal]
    change_due: Decimal

    @property
    def balance_due(self):
        return self.change_due < 0

    @property
    def change_label(self):
        return "Balance due" if self.balance_due else "Change"

    @property
    def change_magnitude(self):
        return abs(self.change_due)

    @property
    def resolved_cash(self):
        """Cash for the receipt: exact change when nothing was entered."""
        return self.cash_received if self.cash_received else self.grand_total

    @property
    def receipt_change(self):
        return self.change_due if self.change_due > 0 else ZERO


def price_cart(items, discount_percent=0, cash_received=None):
    """
    Price a sequence of sale items.

    `changeDue` is zero while no cash has been entered. Cash entered as 0
    counts as entered, so the whole total shows as the balance still owed.
    """
    subtotal = sum((item.line_total for item in items), ZERO)
    percent = resolve_discount_percent(discount_percent)
    discount_amount = subtotal * percent / HUNDRED
    grand_total = subtotal - discount_amount
    cash = parse_amount(cash_received)
    change_due = cash - grand_total if cash is not None else ZERO
    return CartTotals(
        subtotal=subtotal,
        discount_percent=percent,
        discount_amount=discount_amount,
        grand_total=grand_total,
        cash_received=cash,
        change_due=change_due,
    )


class InvoiceNumberGenerator:
    """
    Issue `INV-` numbers from the millisecond clock.

    Numbers are strictly increasing within the session and never repeat an
    id already present in the sale history.
    """
    PREFIX = "INV-"
    PATTERN = re.compile(r"^INV-(\d+)$")

    def __init__(self, existing_ids=(), clock=None):
        self._clock = clock or timezone.now
        self._issued = set(existing_ids)
        self._last = 0
        for invoice_id in self._issued:
            match = self.PATTERN.match(str(invoice_id))
            if match:
                self._last = max(self._last, int(match.group(1)))

    def next_id(self):
        candidate = int(self._clock().timestamp() * 1000) % 1_000_000
        if candidate <= self._last:
            candidate = self._last + 1
        invoice_id = f"{self.PREFIX}{candidate:06d}"
        while invoice_id in self._issued:
            candidate += 1
            invoice_id = f"{self.PREFIX}{candidate:06d}"
        self._last = candidate
        self._issued.add(invoice_id)
        return invoice_id


class Cart:
    """
    Working set of line items for one checkout.

    Lines keep the order in which medicines were first added.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.lines = []
        self.customer_name = ""
        self.discount_percent = ZERO
        self.cash_received = None

    def __len__(self):
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def is_empty(self):
        return not self.lines

    def index_of(self, medicine_id):
        for index, line in enumerate(self.lines):
            if line.medicine_id == medicine_id:
                return index
        return None

    def get(self, medicine_id):
        index = self.index_of(medicine_id)
        return None if index is None else self.lines[index]

    def put(self, item):
        index = self.index_of(item.medicine_id)
        if index is None:
            self.lines.append(item)
        else:
            self.lines[index] = item

    def discard(self, medicine_id):
        self.lines = [line for line in self.lines if line.medicine_id != medicine_id]

    def snapshot(self):
        return tuple(self.lines)


@dataclass(frozen=True)
class SettlementResult:
    """What a settlement changed, for the caller to commit."""
    sale: Sale
    totals: CartTotals
    receipt: Receipt
    adjustments: tuple = field(default_factory=tuple)
    warnings: tuple = field(default_factory=tuple)


class TransactionEngine:
    def __init__(self, ledger, invoice_numbers=None, clock=None):
        self.ledger = ledger
        self.clock = clock or timezone.now
        self.invoice_numbers = invoice_numbers or InvoiceNumberGenerator(clock=self.clock)
        self.cart = Cart()

    # Cart assembly

    def add_to_cart(self, medicine_id):
        """
        Put one more unit of a medicine in the cart.

        Silently does nothing when the cart already holds every unit on hand.
        """
        medicine = self.ledger.get(medicine_id)
        line = self.cart.get(medicine_id)
        if line is None:
            if medicine.quantity < 1:
                return None
            line = SaleItem(
                medicine_id=medicine.id,
                name=medicine.name,
                quantity=1,
                price_at_sale=medicine.price,
            )
        elif line.quantity + 1 <= medicine.quantity:
            line = line.with_quantity(line.quantity + 1)
        else:
            return line
        self.cart.put(line)
        return line

    def update_quantity(self, medicine_id, delta):
        """
        Shift a line's quantity by `delta`, keeping it between 1 and the stock on hand.
        """
        line = self.cart.get(medicine_id)
        if line is None:
            raise NotFoundError(medicine_id, kind="Cart line")
        medicine = self.ledger.get(medicine_id)
        quantity = max(1, min(line.quantity + int(delta), medicine.quantity))
        line = line.with_quantity(quantity)
        self.cart.put(line)
        return line

    def remove_from_cart(self, medicine_id):
        self.cart.discard(medicine_id)

    def set_customer_name(self, name):
        self.cart.customer_name = (name or "").strip()

    def set_discount(self, percent):
        self.cart.discount_percent = resolve_discount_percent(percent)

    def set_cash_received(self, amount):
        self.cart.cash_received = parse_amount(amount)

    def clear_cart(self):
        self.cart.reset()

    @property
    def totals(self):
        return price_cart(self.cart.lines, self.cart.discount_percent, self.cart.cash_received)

    # Settlement

    def _check_stock(self):
        warnings = []
        for line in self.cart:
            medicine = self.ledger.get(line.medicine_id)
            if line.quantity > medicine.quantity:
                warnings.append(OversellWarning(line.medicine_id, line.name, line.quantity, medicine.quantity))
        return warnings

    def process_sale(self, customer_name=None, discount_percent=None, cash_received=None, allow_oversell=None):
        """
        Settle the cart into a `Sale`.

        Arguments left as None fall back to the values already set on the
        cart. Stock is checked before anything is touched: a shortfall
        raises `OversellError` unless `allow_oversell` is true, in which
        case each deduction is clamped at zero and reported.
        """
        if self.cart.is_empty():
            raise EmptyCartError()

        if customer_name is not None:
            self.set_customer_name(customer_name)
        if discount_percent is not None:
            self.set_discount(discount_percent)
        if cash_received is not None:
            self.set_cash_received(cash_received)
        if allow_oversell is None:
            allow_oversell = settings.POS_ALLOW_OVERSELL

        shortfalls = self._check_stock()
        if shortfalls and not allow_oversell:
            raise OversellError(shortfalls)

        totals = self.totals
        items = self.cart.snapshot()

        adjustments = tuple(self.ledger.decrement(line.medicine_id, line.quantity) for line in items)
        warnings = tuple(w for w in (a.as_warning() for a in adjustments) if w is not None)

        sale = Sale(
            id=self.invoice_numbers.next_id(),
            timestamp=self.clock(),
            items=items,
            total_amount=totals.grand_total,
            customer_name=resolve_customer_name(self.cart.customer_name),
        )
        receipt = Receipt.for_settlement(sale, totals)
        self.cart.reset()

        logger.info(
            "Settled %s for %s: %s line(s), total %s",
            sale.id,
            sale.customer_name,
            len(sale.items),
            sale.total_amount,
        )
        return SettlementResult(sale=sale, totals=totals, receipt=receipt, adjustments=adjustments, warnings=warnings)


class SalesReportService:
    """
    Read-only views over the sale history.
    """

    @staticmethod
    def search(history, term=""):
        """Match invoice id or customer name, newest sale first."""
        needle = (term or "").strip().lower()
        matches = [
            sale for sale in history
            if needle in sale.id.lower() or needle in (sale.customer_name or "").lower()
        ]
        return list(reversed(matches))

    @staticmethod
    def get_stats(history):
        total = sum((sale.total_amount for sale in history), ZERO)
        count = len(history)
        average = total / count if count else ZERO
        return {
            "total_revenue": total,
            "invoice_count": count,
            "average_order_value": average,
        }

    @staticmethod
    def total_for_day(history, day):
        return sum(
            (sale.total_amount for sale in history if timezone.localtime(sale.timestamp).date() == day),
            ZERO,
        )

    @staticmethod
    def daily_totals(history, days=7, today=None):
        """Sales totals for the last `days` days, oldest first, including empty days."""
        today = today or timezone.localdate()
        by_day = {}
        for sale in history:
            day = timezone.localtime(sale.timestamp).date()
            by_day[day] = by_day.get(day, ZERO) + sale.total_amount

        series = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            series.append({"date": day, "amount": by_day.get(day, ZERO)})
        return series
