"""
API views for sales app.

The cart endpoints drive one checkout on the terminal; the sale endpoints
read the append-only sale history and reprint receipts.
"""
from django.http import HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.inventory.serializers import StockAdjustmentSerializer
from apps.terminal.mixins import TerminalSessionMixin
from .receipts import render_receipt
from .serializers import (
    CartAddSerializer,
    CartQuantitySerializer,
    CheckoutFieldsSerializer,
    CheckoutSerializer,
    SaleListSerializer,
    SaleSerializer,
    cart_payload,
)
from .services import SalesReportService


class CartViewSet(TerminalSessionMixin, viewsets.ViewSet):
    """
    Checkout cart of the terminal session.
    """

    @property
    def engine(self):
        return self.pos_session.engine

    def list(self, request):
        return Response(cart_payload(self.engine))

    @action(detail=False, methods=["post"])
    def add(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.engine.add_to_cart(serializer.validated_data["medicineId"])
        return Response(cart_payload(self.engine))

    @action(detail=False, methods=["post"])
    def quantity(self, request):
        serializer = CartQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.engine.update_quantity(serializer.validated_data["medicineId"], serializer.validated_data["delta"])
        return Response(cart_payload(self.engine))

    @action(detail=False, methods=["post"])
    def remove(self, request):
        serializer = CartAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.engine.remove_from_cart(serializer.validated_data["medicineId"])
        return Response(cart_payload(self.engine))

    @action(detail=False, methods=["post", "patch"])
    def checkout_fields(self, request):
        serializer = CheckoutFieldsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        if "customerName" in data:
            self.engine.set_customer_name(data["customerName"])
        if "discountPercent" in data:
            self.engine.set_discount(data["discountPercent"])
        if "cashReceived" in data:
            self.engine.set_cash_received(data["cashReceived"])
        return Response(cart_payload(self.engine))

    @action(detail=False, methods=["post"])
    def clear(self, request):
        self.engine.clear_cart()
        return Response(cart_payload(self.engine))

    @action(detail=False, methods=["post"])
    def checkout(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = self.pos_session.settle(
            customer_name=data.get("customerName"),
            discount_percent=data.get("discountPercent"),
            cash_received=data.get("cashReceived"),
            allow_oversell=data.get("allowOversell"),
        )
        payload = {
            "message": "Sale created successfully",
            "sale": SaleSerializer(result.sale).data,
            "receipt": result.receipt.as_dict(),
            "receiptText": render_receipt(result.receipt),
            "adjustments": StockAdjustmentSerializer(result.adjustments, many=True).data,
            "oversell": [warning.as_dict() for warning in result.warnings],
        }
        return Response(self.with_persistence_status(payload), status=status.HTTP_201_CREATED)


class SaleViewSet(TerminalSessionMixin, viewsets.ViewSet):
    lookup_value_regex = "[^/]+"

    def list(self, request):
        sales = SalesReportService.search(self.pos_session.history, request.query_params.get("search", ""))
        return Response({"count": len(sales), "sales": SaleListSerializer(sales, many=True).data})

    def retrieve(self, request, pk=None):
        sale = self.pos_session.find_sale(pk)
        return Response(SaleSerializer(sale).data)

    @action(detail=True, methods=["get"])
    def receipt(self, request, pk=None):
        receipt = self.pos_session.reprint(pk)
        text = render_receipt(receipt)
        if request.query_params.get("format") == "txt":
            return HttpResponse(text, content_type="text/plain; charset=utf-8")
        return Response({"receipt": receipt.as_dict(), "receiptText": text})

    @action(detail=False, methods=["get"])
    def stats(self, request):
        stats = SalesReportService.get_stats(self.pos_session.history)
        return Response(
            {
                "total_revenue": float(stats["total_revenue"]),
                "invoice_count": stats["invoice_count"],
                "average_order_value": float(stats["average_order_value"]),
            },
            status=status.HTTP_200_OK,
        )
