"""
Formatting helpers for receipts and sales reports.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.utils import timezone

CENT = Decimal("0.01")


def money(amount):
    """Round an amount to cents for display."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(amount):
    return f"{money(amount):,.2f}"


def format_currency(amount):
    """
    Format amount as currency string.

    Args:
        amount: Decimal or float amount

    Returns:
        str: Formatted currency string, e.g. "PKR 1,250.00"
    """
    return f"{settings.CURRENCY_LABEL} {format_amount(amount)}"


def format_percentage(value):
    value = Decimal(value).normalize()
    return f"{value:f}%"


def format_timestamp(moment):
    if moment is None:
        return ""
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    return moment.strftime("%Y-%m-%d %H:%M")


def to_float(amount):
    """Amounts leave the terminal as plain floating-point numbers."""
    return float(amount) if amount is not None else None
