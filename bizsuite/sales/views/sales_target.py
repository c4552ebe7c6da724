from drf_yasg.utils import swagger_auto_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizsuite.sales import services as sales_services
from bizsuite.sales.models import SalesTarget
from bizsuite.sales.serializers.sales_target import SalesTargetSerializer
from bizsuite.users.principal import principal_for


class SalesTargetViewSet(
    mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet
):
    """
    Monthly sales targets per agent.

    - list: targets for ``?period=YYYY-MM`` (all periods when omitted), each
      with the amount achieved from accepted quotations in that month
    - create: upsert by (agent_name, period); managers and sales executives only
    """

    serializer_class = SalesTargetSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = SalesTarget.objects.all()
        period = self.request.query_params.get("period")
        if period:
            qs = qs.filter(period=period)
        return qs

    @swagger_auto_schema(tags=["Sales targets"], request_body=SalesTargetSerializer)
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        target = sales_services.upsert_sales_target(
            principal_for(request.user),
            serializer.validated_data["agent_name"],
            serializer.validated_data["period"],
            serializer.validated_data["target_amount"],
        )
        out = self.get_serializer(target)
        return Response(out.data, status=status.HTTP_200_OK)
