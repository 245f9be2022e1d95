"""
Serializers for medicines app.

Medicine records are plain objects held by the inventory ledger, so these
are `Serializer` classes rather than `ModelSerializer`s. Field names on the
wire are the stored record names (camelCase).
"""
import uuid
from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from .domain import Medicine


class MoneyField(serializers.DecimalField):
    """
    Decimal amount that is written out as a plain floating-point number.
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", None)
        kwargs.setdefault("decimal_places", None)
        kwargs.setdefault("min_value", Decimal("0"))
        super().__init__(**kwargs)

    def to_representation(self, value):
        if value is None:
            return None
        return float(value)


class OptionalDateField(serializers.DateField):
    """Date that treats an empty string as no date."""

    def to_internal_value(self, value):
        if value in ("", None):
            return None
        return super().to_internal_value(value)


def default_low_stock_threshold():
    return settings.DEFAULT_LOW_STOCK_THRESHOLD


class MedicineRecordSerializer(serializers.Serializer):
    """
    Stored shape of a medicine.

    Absent fields load as their defaults.
    """
    id = serializers.CharField(required=False)
    name = serializers.CharField(max_length=200)
    category = serializers.CharField(required=False, allow_blank=True, default="")
    batchNumber = serializers.CharField(source="batch_number", required=False, allow_blank=True, default="")
    expiryDate = OptionalDateField(source="expiry_date", required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=0, required=False, default=0)
    price = MoneyField(required=False, default=Decimal("0"))
    lowStockThreshold = serializers.IntegerField(
        source="low_stock_threshold",
        min_value=0,
        required=False,
        default=default_low_stock_threshold,
    )
    manufacturer = serializers.CharField(required=False, allow_blank=True, default="")

    def create(self, validated_data):
        validated_data.setdefault("id", uuid.uuid4().hex)
        return Medicine(**validated_data)


class MedicineSerializer(MedicineRecordSerializer):
    """
    Medicine as shown to the terminal, with stock flags.
    """
    id = serializers.CharField(read_only=True)
    isLowStock = serializers.SerializerMethodField()
    isExpired = serializers.SerializerMethodField()
    stockValue = serializers.SerializerMethodField()

    def get_isLowStock(self, obj):
        return obj.is_low_stock()

    def get_isExpired(self, obj):
        return obj.is_expired()

    def get_stockValue(self, obj):
        return float(obj.stock_value)
