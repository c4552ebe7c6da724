from rest_framework import serializers

from bizsuite.requisitions.models import RequisitionItem


class RequisitionItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(
        max_digits=16, decimal_places=2, read_only=True
    )

    class Meta:
        model = RequisitionItem
        fields = ("item_name", "quantity", "unit", "unit_cost", "line_total")
