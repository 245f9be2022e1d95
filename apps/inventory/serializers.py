"""
Serializers for inventory app.
"""
from rest_framework import serializers


class DecrementSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=0)


class StockAdjustmentSerializer(serializers.Serializer):
    medicineId = serializers.CharField(source="medicine_id")
    name = serializers.CharField()
    previous = serializers.IntegerField()
    requested = serializers.IntegerField()
    applied = serializers.IntegerField()
    resulting = serializers.IntegerField()
    clamped = serializers.BooleanField()
