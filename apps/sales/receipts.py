"""
Receipt projection and thermal-printer text rendering.

One `Receipt` type serves both the receipt printed at checkout and the
reprint of a historical sale; `is_reprint` selects the framing text.
"""
import textwrap
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .utils import format_amount, format_currency, format_timestamp, to_float


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    def as_dict(self):
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unitPrice": to_float(self.unit_price),
            "lineTotal": to_float(self.line_total),
        }


@dataclass(frozen=True)
class Receipt:
    invoice_id: str
    timestamp: datetime
    customer_name: str
    lines: tuple
    subtotal: Decimal
    discount: Decimal
    grand_total: Decimal
    cash_received: Decimal
    change: Decimal
    is_reprint: bool = False
    reprinted_at: Optional[datetime] = field(default=None)

    @staticmethod
    def _lines(sale):
        return tuple(
            ReceiptLine(
                name=item.name,
                quantity=item.quantity,
                unit_price=item.price_at_sale,
                line_total=item.line_total,
            )
            for item in sale.items
        )

    @classmethod
    def for_settlement(cls, sale, totals):
        return cls(
            invoice_id=sale.id,
            timestamp=sale.timestamp,
            customer_name=sale.customer_name,
            lines=cls._lines(sale),
            subtotal=totals.subtotal,
            discount=totals.discount_amount,
            grand_total=sale.total_amount,
            cash_received=totals.resolved_cash,
            change=totals.receipt_change,
        )

    @classmethod
    def for_reprint(cls, sale, reprinted_at=None):
        """
        Rebuild a receipt from a stored sale.

        Cash and change are not kept on the sale, so a reprint shows exact
        cash and no change.
        """
        return cls(
            invoice_id=sale.id,
            timestamp=sale.timestamp,
            customer_name=sale.customer_name or settings.WALK_IN_CUSTOMER,
            lines=cls._lines(sale),
            subtotal=sale.subtotal,
            discount=sale.discount_amount,
            grand_total=sale.total_amount,
            cash_received=sale.total_amount,
            change=Decimal("0"),
            is_reprint=True,
            reprinted_at=reprinted_at or timezone.now(),
        )

    @property
    def title(self):
        return "REPRINT INVOICE" if self.is_reprint else "CASH INVOICE"

    def as_dict(self):
        return {
            "invoiceId": self.invoice_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "customerName": self.customer_name,
            "items": [line.as_dict() for line in self.lines],
            "subtotal": to_float(self.subtotal),
            "discount": to_float(self.discount),
            "grandTotal": to_float(self.grand_total),
            "cashReceived": to_float(self.cash_received),
            "change": to_float(self.change),
            "isReprint": self.is_reprint,
            "reprintedAt": self.reprinted_at.isoformat() if self.reprinted_at else None,
        }


def _pair(label, value, width):
    gap = max(1, width - len(label) - len(value))
    return f"{label}{' ' * gap}{value}"


def _item_rows(line, width):
    numbers = f"{line.quantity:>4}{format_amount(line.unit_price):>10}{format_amount(line.line_total):>10}"
    name_width = width - len(numbers)
    if len(line.name) <= name_width:
        return [f"{line.name:<{name_width}}{numbers}"]
    rows = textwrap.wrap(line.name, width)
    rows.append(f"{'':<{name_width}}{numbers}")
    return rows


def render_receipt(receipt, width=None):
    """
    Render a receipt as fixed-width text for an 80mm thermal printer.
    """
    width = width or settings.RECEIPT_WIDTH
    rule = "-" * width
    stars = "*" * width

    rows = [settings.PHARMACY_NAME.upper().center(width)]
    if settings.PHARMACY_REGISTRATION:
        rows.append(settings.PHARMACY_REGISTRATION.center(width))
    rows.extend(part.center(width) for part in textwrap.wrap(settings.PHARMACY_ADDRESS, width))
    rows.append(f"TEL: {settings.PHARMACY_PHONE}".center(width))
    rows.extend([rule, receipt.title.center(width), rule])

    rows.append(_pair("INV NO:", receipt.invoice_id, width))
    rows.append(_pair("DATE:", format_timestamp(receipt.timestamp), width))
    rows.append(_pair("CUSTOMER:", receipt.customer_name, width))
    rows.append(rule)

    header_numbers = f"{'QTY':>4}{'PRICE':>10}{'TOTAL':>10}"
    rows.append(f"{'ITEM':<{width - len(header_numbers)}}{header_numbers}")
    for line in receipt.lines:
        rows.extend(_item_rows(line, width))
    rows.append(rule)

    rows.append(_pair("SUBTOTAL:", format_amount(receipt.subtotal), width))
    if receipt.discount > 0:
        rows.append(_pair("DISCOUNT:", f"-{format_amount(receipt.discount)}", width))
    rows.append(_pair("NET TOTAL:", format_currency(receipt.grand_total), width))
    rows.append(_pair("CASH PAID:", format_amount(receipt.cash_received), width))
    rows.append(_pair("CHANGE:", format_amount(receipt.change), width))

    rows.append(stars)
    if receipt.is_reprint:
        rows.append(f"REPRINTED ON {format_timestamp(receipt.reprinted_at)}".center(width))
    rows.extend(text.strip().center(width) for text in settings.PHARMACY_RECEIPT_FOOTER if text.strip())
    rows.append(stars)
    return "\n".join(row.rstrip() for row in rows) + "\n"
