from rest_framework import serializers

from bizsuite.requisitions.models import Requisition

from .approval_step import ApprovalStepSerializer
from .requisition_item import RequisitionItemSerializer


class RequisitionSerializer(serializers.ModelSerializer):
    items = RequisitionItemSerializer(many=True, required=False)
    approval_trail = ApprovalStepSerializer(
        source="approval_steps", many=True, read_only=True
    )
    created_by = serializers.EmailField(source="created_by.email", read_only=True)

    class Meta:
        model = Requisition
        fields = (
            "id",
            "request_type",
            "title",
            "reason",
            "amount_or_value",
            "items",
            "status",
            "current_stage",
            "approval_trail",
            "created_by",
            "created_at",
            "needed_by_date",
            "delivery_location",
            "version",
        )
        read_only_fields = (
            "id",
            "status",
            "current_stage",
            "created_at",
            "version",
        )
        extra_kwargs = {"amount_or_value": {"required": False}}


class TransitionSerializer(serializers.Serializer):
    version = serializers.IntegerField(required=False, min_value=1)
