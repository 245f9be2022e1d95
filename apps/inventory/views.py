"""
API views for inventory app.

Stock levels, low stock and expiry alerts, and manual stock deductions.
"""
from django.utils.dateparse import parse_date
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.medicines.serializers import MedicineSerializer
from apps.terminal.mixins import TerminalSessionMixin
from .serializers import DecrementSerializer, StockAdjustmentSerializer


class StockViewSet(TerminalSessionMixin, viewsets.ViewSet):
    lookup_value_regex = "[^/]+"

    def list(self, request):
        medicines = self.pos_session.ledger.all()
        return Response({"count": len(medicines), "medicines": MedicineSerializer(medicines, many=True).data})

    @action(detail=False, methods=["get"])
    def low_stock(self, request):
        medicines = self.pos_session.ledger.find_low_stock()
        return Response({"count": len(medicines), "medicines": MedicineSerializer(medicines, many=True).data})

    @action(detail=False, methods=["get"])
    def expired(self, request):
        as_of = None
        raw = request.query_params.get("as_of")
        if raw:
            try:
                as_of = parse_date(raw)
            except ValueError:
                as_of = None
            if as_of is None:
                return Response({"error": "as_of must be a YYYY-MM-DD date"}, status=status.HTTP_400_BAD_REQUEST)

        medicines = self.pos_session.ledger.find_expired(as_of)
        return Response(
            {
                "count": len(medicines),
                "as_of": as_of.isoformat() if as_of else None,
                "medicines": MedicineSerializer(medicines, many=True).data,
            }
        )

    @action(detail=True, methods=["post"])
    def decrement(self, request, pk=None):
        serializer = DecrementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        adjustment = self.pos_session.decrement_stock(pk, serializer.validated_data["amount"])
        payload = {"adjustment": StockAdjustmentSerializer(adjustment).data}
        warning = adjustment.as_warning()
        if warning is not None:
            payload["oversell"] = warning.as_dict()
        return Response(self.with_persistence_status(payload))
