from rest_framework import serializers

from bizsuite.sales.models import OrderItem, QuotationItem


class QuotationItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuotationItem
        fields = ("product_id", "description", "quantity", "unit_price")


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ("product_id", "description", "quantity", "unit_price")
        read_only_fields = fields
