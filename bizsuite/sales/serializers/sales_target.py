from rest_framework import serializers

from bizsuite.sales import services as sales_services
from bizsuite.sales.models import SalesTarget


class SalesTargetSerializer(serializers.ModelSerializer):
    achieved_amount = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()

    class Meta:
        model = SalesTarget
        fields = (
            "id",
            "agent_name",
            "period",
            "target_amount",
            "achieved_amount",
            "progress",
        )
        read_only_fields = ("id", "achieved_amount", "progress")
        # upsert semantics: (agent_name, period) uniqueness is resolved in the service
        validators = []

    def _progress(self, obj):
        cache = self.context.setdefault("_progress", {})
        if obj.pk not in cache:
            cache[obj.pk] = sales_services.target_progress(obj)
        return cache[obj.pk]

    def get_achieved_amount(self, obj):
        return str(self._progress(obj)["achieved_amount"])

    def get_progress(self, obj):
        return str(self._progress(obj)["progress"])
