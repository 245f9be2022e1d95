"""
Serializers for sales app.

Handles the stored shape of Sale and SaleItem records and the payloads of
the cart and checkout endpoints.
"""
from django.conf import settings
from rest_framework import serializers

from apps.medicines.serializers import MoneyField
from .domain import Sale, SaleItem
from .utils import format_percentage


class SaleItemRecordSerializer(serializers.Serializer):
    medicineId = serializers.CharField(source="medicine_id")
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)
    priceAtSale = MoneyField(source="price_at_sale")

    def create(self, validated_data):
        return SaleItem(**validated_data)


class SaleItemSerializer(SaleItemRecordSerializer):
    lineTotal = serializers.SerializerMethodField()

    def get_lineTotal(self, obj):
        return float(obj.line_total)


class SaleRecordSerializer(serializers.Serializer):
    """
    Stored shape of a sale.
    """
    id = serializers.CharField()
    timestamp = serializers.DateTimeField()
    items = SaleItemRecordSerializer(many=True)
    totalAmount = MoneyField(source="total_amount")
    customerName = serializers.CharField(source="customer_name", required=False, allow_blank=True, default="")

    def create(self, validated_data):
        items = [SaleItem(**item) for item in validated_data.pop("items")]
        return Sale(items=items, **validated_data)


class SaleSerializer(SaleRecordSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    subtotal = serializers.SerializerMethodField()
    discountAmount = serializers.SerializerMethodField()
    itemsCount = serializers.SerializerMethodField()

    def get_subtotal(self, obj):
        return float(obj.subtotal)

    def get_discountAmount(self, obj):
        return float(obj.discount_amount)

    def get_itemsCount(self, obj):
        """Get count of units in the sale."""
        return obj.items_count


class SaleListSerializer(serializers.Serializer):
    """
    Simplified serializer for sale list views.
    """
    id = serializers.CharField()
    timestamp = serializers.DateTimeField()
    totalAmount = MoneyField(source="total_amount")
    customerName = serializers.SerializerMethodField()
    itemsCount = serializers.IntegerField(source="items_count")

    def get_customerName(self, obj):
        return obj.customer_name or settings.WALK_IN_CUSTOMER


class CartAddSerializer(serializers.Serializer):
    medicineId = serializers.CharField()


class CartQuantitySerializer(serializers.Serializer):
    medicineId = serializers.CharField()
    delta = serializers.IntegerField()


class CheckoutFieldsSerializer(serializers.Serializer):
    """
    Optional checkout inputs. Amounts stay free text; the engine resolves them.
    """
    customerName = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    discountPercent = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    cashReceived = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CheckoutSerializer(CheckoutFieldsSerializer):
    allowOversell = serializers.BooleanField(required=False, allow_null=True, default=None)


def cart_payload(engine):
    """Live cart view: lines plus totals derived from the current cart."""
    totals = engine.totals
    return {
        "items": SaleItemSerializer(engine.cart.lines, many=True).data,
        "customerName": engine.cart.customer_name,
        "discountPercent": float(totals.discount_percent),
        "cashReceived": float(totals.cash_received) if totals.cash_received is not None else None,
        "subtotal": float(totals.subtotal),
        "discountLabel": f"Discount ({format_percentage(totals.discount_percent)})",
        "discountAmount": float(totals.discount_amount),
        "grandTotal": float(totals.grand_total),
        "changeDue": float(totals.change_due),
        "changeLabel": totals.change_label,
        "changeAmount": float(totals.change_magnitude),
    }
