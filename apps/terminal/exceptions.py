"""
Error taxonomy for the pharmacy terminal.

`NotFoundError` and `EmptyCartError` are recoverable at the call site.
`OversellWarning` is advisory: it is collected and reported, never raised
unless a caller asks for strict settlement, in which case the warnings
travel inside an `OversellError`.
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


class PharmacyError(Exception):
    """Base class for terminal errors."""


class NotFoundError(PharmacyError, LookupError):
    def __init__(self, medicine_id, kind="Medicine"):
        self.medicine_id = medicine_id
        self.kind = kind
        super().__init__(f"{kind} {medicine_id!r} not found.")


class EmptyCartError(PharmacyError):
    def __init__(self, message="Cannot settle an empty cart."):
        super().__init__(message)


class GatewayError(PharmacyError):
    """A persistence or assistant call failed."""


class OversellWarning(UserWarning):
    """
    A stock deduction asked for more units than were on hand.
    """

    def __init__(self, medicine_id, name, requested, available):
        self.medicine_id = medicine_id
        self.name = name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Oversell on {name or medicine_id}: requested {requested}, only {available} in stock."
        )

    def as_dict(self):
        return {
            "medicineId": self.medicine_id,
            "name": self.name,
            "requested": self.requested,
            "available": self.available,
        }


class OversellError(PharmacyError):
    def __init__(self, warnings):
        self.warnings = list(warnings)
        names = ", ".join(w.name or str(w.medicine_id) for w in self.warnings)
        super().__init__(f"Insufficient stock for: {names}")


def api_exception_handler(exc, context):
    """
    Map terminal errors onto HTTP responses; defer everything else to DRF.
    """
    if isinstance(exc, NotFoundError):
        return Response({"error": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, EmptyCartError):
        return Response({"error": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, OversellError):
        return Response(
            {"error": str(exc), "oversell": [w.as_dict() for w in exc.warnings]},
            status=status.HTTP_409_CONFLICT,
        )
    if isinstance(exc, GatewayError):
        return Response({"error": str(exc)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
        return Response(detail, status=status.HTTP_400_BAD_REQUEST)
    return exception_handler(exc, context)
