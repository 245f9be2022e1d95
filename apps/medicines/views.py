"""
API views for medicines app.

Handles CRUD operations on the medicines held by the terminal's ledger.
"""
from rest_framework import status, viewsets
from rest_framework.response import Response

from apps.terminal.mixins import TerminalSessionMixin
from .serializers import MedicineSerializer


class MedicineViewSet(TerminalSessionMixin, viewsets.ViewSet):
    """
    ViewSet for medicines.

    `?search=` filters by name or category; `?available=true` hides
    medicines that are out of stock.
    """

    lookup_value_regex = "[^/]+"

    def list(self, request):
        ledger = self.pos_session.ledger
        term = request.query_params.get("search", "")
        if request.query_params.get("available") == "true":
            medicines = list(ledger.available(term))
        else:
            medicines = list(ledger.search(term))
        serializer = MedicineSerializer(medicines, many=True)
        return Response({"count": len(medicines), "medicines": serializer.data})

    def create(self, request):
        serializer = MedicineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        medicine = self.pos_session.add_medicine(**serializer.validated_data)
        payload = MedicineSerializer(medicine).data
        return Response(self.with_persistence_status(dict(payload)), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        medicine = self.pos_session.ledger.get(pk)
        return Response(MedicineSerializer(medicine).data)

    def partial_update(self, request, pk=None):
        medicine = self.pos_session.ledger.get(pk)
        serializer = MedicineSerializer(medicine, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        medicine = self.pos_session.update_medicine(pk, **serializer.validated_data)
        return Response(self.with_persistence_status(dict(MedicineSerializer(medicine).data)))

    def destroy(self, request, pk=None):
        self.pos_session.remove_medicine(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)
