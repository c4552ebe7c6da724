from rest_framework import serializers

from bizsuite.requisitions.models import ApprovalStep


class ApprovalStepSerializer(serializers.ModelSerializer):
    user = serializers.EmailField(source="acted_by.email", read_only=True, default=None)

    class Meta:
        model = ApprovalStep
        fields = ("position", "role", "status", "user", "timestamp")
        read_only_fields = fields
