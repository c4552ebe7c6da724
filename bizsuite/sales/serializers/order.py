from rest_framework import serializers

from bizsuite.sales.models import Order

from .line_item import OrderItemSerializer


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    quotation_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = (
            "id",
            "customer",
            "date",
            "items",
            "status",
            "quotation_id",
            "agent_name",
            "tracking_number",
            "carrier",
            "payment_method",
            "total_amount",
            "version",
        )
        read_only_fields = fields


class ReceivePaymentSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(
        choices=Order.PaymentMethod.choices, required=False, allow_blank=True
    )
    version = serializers.IntegerField(required=False, min_value=1)
