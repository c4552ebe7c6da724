from rest_framework import serializers

from bizsuite.sales.models import Quotation

from .line_item import QuotationItemSerializer


class QuotationSerializer(serializers.ModelSerializer):
    items = QuotationItemSerializer(many=True, required=False)
    total = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)
    has_order = serializers.SerializerMethodField()

    class Meta:
        model = Quotation
        fields = (
            "id",
            "customer",
            "date",
            "expiry_date",
            "items",
            "total",
            "status",
            "signature_status",
            "agent_name",
            "has_order",
            "version",
        )
        read_only_fields = (
            "id",
            "status",
            "signature_status",
            "agent_name",
            "version",
        )
        extra_kwargs = {"date": {"required": False}}

    def get_has_order(self, obj):
        return hasattr(obj, "order")


class VersionSerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=1)
