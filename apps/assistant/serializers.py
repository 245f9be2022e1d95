"""
Serializers for assistant app.
"""
from rest_framework import serializers


class AskSerializer(serializers.Serializer):
    prompt = serializers.CharField(max_length=4000, trim_whitespace=True)


class MedicineSummarySerializer(serializers.Serializer):
    name = serializers.CharField()
    stock = serializers.IntegerField(source="quantity")
    expiry = serializers.DateField(source="expiry_date", allow_null=True)
    lowStock = serializers.SerializerMethodField()

    def get_lowStock(self, obj):
        return obj.is_low_stock()


class InventoryHealthSerializer(serializers.Serializer):
    """
    Structured inventory health check returned by the model.
    """
    PRIORITIES = ["Low", "Medium", "High"]

    criticalItems = serializers.ListField(child=serializers.CharField(allow_blank=True), allow_empty=True)
    summary = serializers.CharField(allow_blank=True)
    restockPriority = serializers.ChoiceField(choices=PRIORITIES)
