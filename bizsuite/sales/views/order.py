from drf_yasg.utils import swagger_auto_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizsuite.sales import services as sales_services
from bizsuite.sales.serializers.order import OrderSerializer, ReceivePaymentSerializer
from bizsuite.users.principal import principal_for


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return sales_services.visible_orders(principal_for(self.request.user))

    @swagger_auto_schema(
        tags=["Orders"],
        security=[{"Bearer": []}],
        request_body=ReceivePaymentSerializer,
    )
    @action(detail=True, methods=["patch"], url_path="receive-payment")
    def receive_payment(self, request, pk=None):
        ser = ReceivePaymentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = sales_services.receive_payment(
            principal_for(request.user),
            pk,
            payment_method=ser.validated_data.get("payment_method", ""),
            expected_version=ser.validated_data.get("version"),
        )
        return Response(OrderSerializer(order).data, status=200)
