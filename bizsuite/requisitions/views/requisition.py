from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizsuite.exceptions import WorkflowValidationError
from bizsuite.exports import export_response
from bizsuite.requisitions import services as req_services
from bizsuite.requisitions.serializers.requisition import (
    RequisitionSerializer,
    TransitionSerializer,
)
from bizsuite.users.principal import principal_for

EXPORT_HEADERS = [
    "ID",
    "Title",
    "Type",
    "Amount/Value",
    "Status",
    "Current Stage",
    "Created By",
    "Needed By",
]

export_param = openapi.Parameter(
    "export_format",
    openapi.IN_QUERY,
    description="csv, xlsx or pdf",
    type=openapi.TYPE_STRING,
)


class RequisitionViewSet(
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = RequisitionSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        principal = principal_for(self.request.user)
        qs = req_services.visible_requisitions(principal)
        mine = self.request.query_params.get("mine")
        if mine in ("1", "true"):
            qs = qs.filter(created_by_id=principal.id)
        return qs

    def _respond(self, requisition, status_code=status.HTTP_200_OK):
        out = RequisitionSerializer(requisition, context=self.get_serializer_context())
        return Response(out.data, status=status_code)

    def _version(self, request):
        ser = TransitionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return ser.validated_data.get("version")

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        requisition = req_services.create_requisition(
            principal_for(request.user), serializer.validated_data
        )
        return self._respond(requisition, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        requisition = req_services.update_requisition(
            principal_for(request.user),
            instance.pk,
            serializer.validated_data,
            expected_version=request.data.get("version"),
        )
        return self._respond(requisition)

    @swagger_auto_schema(
        tags=["Requisitions"],
        security=[{"Bearer": []}],
        request_body=TransitionSerializer,
    )
    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):
        requisition = req_services.decide_requisition(
            principal_for(request.user), pk, True, self._version(request)
        )
        return self._respond(requisition)

    @swagger_auto_schema(
        tags=["Requisitions"],
        security=[{"Bearer": []}],
        request_body=TransitionSerializer,
    )
    @action(detail=True, methods=["patch"])
    def reject(self, request, pk=None):
        requisition = req_services.decide_requisition(
            principal_for(request.user), pk, False, self._version(request)
        )
        return self._respond(requisition)

    @swagger_auto_schema(
        tags=["Requisitions"],
        security=[{"Bearer": []}],
        request_body=TransitionSerializer,
    )
    @action(detail=True, methods=["patch"])
    def issue(self, request, pk=None):
        requisition = req_services.issue_requisition(
            principal_for(request.user), pk, self._version(request)
        )
        return self._respond(requisition)

    @swagger_auto_schema(
        tags=["Requisitions"],
        security=[{"Bearer": []}],
        request_body=TransitionSerializer,
    )
    @action(detail=True, methods=["patch"])
    def cancel(self, request, pk=None):
        requisition = req_services.cancel_requisition(
            principal_for(request.user), pk, self._version(request)
        )
        return self._respond(requisition)

    @swagger_auto_schema(tags=["Requisitions"], security=[{"Bearer": []}])
    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request):
        qs = req_services.awaiting_approval(principal_for(request.user))
        serializer = self.get_serializer(qs, many=True)
        return Response(serializer.data, status=200)

    @swagger_auto_schema(tags=["Requisitions"], security=[{"Bearer": []}])
    @action(detail=False, methods=["get"], url_path="issuance")
    def issuance(self, request):
        qs = req_services.awaiting_issuance(principal_for(request.user))
        serializer = self.get_serializer(qs, many=True)
        return Response(serializer.data, status=200)

    @swagger_auto_schema(
        tags=["Requisitions"],
        security=[{"Bearer": []}],
        manual_parameters=[export_param],
    )
    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        rows = [
            [
                r.id,
                r.title,
                r.get_request_type_display(),
                r.amount_or_value,
                r.status,
                r.current_stage,
                r.created_by.email,
                r.needed_by_date,
            ]
            for r in self.get_queryset().order_by("id")
        ]
        try:
            return export_response(
                request.query_params.get("export_format"),
                "requisitions_export",
                EXPORT_HEADERS,
                rows,
                title="Requisitions",
            )
        except ValueError as exc:
            raise WorkflowValidationError(detail={"export_format": str(exc)})
