from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizsuite.exceptions import WorkflowValidationError
from bizsuite.exports import export_response
from bizsuite.sales import services as sales_services
from bizsuite.sales.serializers.order import OrderSerializer
from bizsuite.sales.serializers.quotation import QuotationSerializer, VersionSerializer
from bizsuite.users.principal import principal_for

EXPORT_HEADERS = ["ID", "Customer", "Agent", "Date", "Expiry Date", "Total", "Status"]

export_param = openapi.Parameter(
    "export_format",
    openapi.IN_QUERY,
    description="csv, xlsx or pdf",
    type=openapi.TYPE_STRING,
)


def quotation_export_rows(quotations):
    return [
        [
            q.id,
            q.customer,
            q.agent_name or "N/A",
            q.date,
            q.expiry_date,
            q.total,
            q.status,
        ]
        for q in quotations
    ]


class QuotationViewSet(viewsets.ModelViewSet):
    serializer_class = QuotationSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "put", "delete", "head", "options"]

    def get_queryset(self):
        qs = sales_services.visible_quotations(principal_for(self.request.user))
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        return qs

    def _respond(self, quotation, status_code=status.HTTP_200_OK):
        out = QuotationSerializer(quotation, context=self.get_serializer_context())
        return Response(out.data, status=status_code)

    def _transition(self, request, pk, action_name):
        ser = VersionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        quotation = sales_services.transition_quotation(
            principal_for(request.user),
            pk,
            action_name,
            expected_version=ser.validated_data.get("version"),
        )
        return self._respond(quotation)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quotation = sales_services.create_quotation(
            principal_for(request.user), serializer.validated_data
        )
        return self._respond(quotation, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        quotation = sales_services.update_quotation(
            principal_for(request.user),
            instance.pk,
            serializer.validated_data,
            expected_version=request.data.get("version"),
        )
        return self._respond(quotation)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        sales_services.delete_quotation(principal_for(request.user), instance.pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @swagger_auto_schema(
        tags=["Quotations"], security=[{"Bearer": []}], request_body=VersionSerializer
    )
    @action(detail=True, methods=["patch"], url_path="request-approval")
    def request_approval(self, request, pk=None):
        return self._transition(request, pk, "approval_requested")

    @swagger_auto_schema(
        tags=["Quotations"], security=[{"Bearer": []}], request_body=VersionSerializer
    )
    @action(detail=True, methods=["patch"], url_path="mark-sent")
    def mark_sent(self, request, pk=None):
        return self._transition(request, pk, "sent")

    @swagger_auto_schema(
        tags=["Quotations"], security=[{"Bearer": []}], request_body=VersionSerializer
    )
    @action(detail=True, methods=["patch"])
    def accept(self, request, pk=None):
        return self._transition(request, pk, "accepted")

    @swagger_auto_schema(
        tags=["Quotations"], security=[{"Bearer": []}], request_body=VersionSerializer
    )
    @action(detail=True, methods=["patch"])
    def decline(self, request, pk=None):
        return self._transition(request, pk, "declined")

    @swagger_auto_schema(
        tags=["Quotations"],
        security=[{"Bearer": []}],
        responses={201: OrderSerializer},
    )
    @action(detail=True, methods=["post"], url_path="approve-sale")
    def approve_sale(self, request, pk=None):
        order = sales_services.approve_sale(principal_for(request.user), pk)
        out = OrderSerializer(order, context=self.get_serializer_context())
        return Response(out.data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        tags=["Quotations"],
        security=[{"Bearer": []}],
        manual_parameters=[export_param],
    )
    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        rows = quotation_export_rows(self.get_queryset().order_by("id"))
        try:
            return export_response(
                request.query_params.get("export_format"),
                "quotations_export",
                EXPORT_HEADERS,
                rows,
                title="Quotations",
            )
        except ValueError as exc:
            raise WorkflowValidationError(detail={"export_format": str(exc)})
