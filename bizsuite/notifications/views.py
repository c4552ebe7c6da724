from drf_yasg.utils import swagger_auto_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from bizsuite.notifications import services as notification_services
from bizsuite.notifications.serializers import MarkReadSerializer, NotificationSerializer


class MyNotificationsView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        tags=["Notifications"],
        security=[{"Bearer": []}],
        responses={200: NotificationSerializer(many=True)},
    )
    def get(self, request):
        qs = notification_services.notifications_for_user(request.user.id)
        data = NotificationSerializer(qs, many=True).data
        unread = sum(1 for n in data if not n["is_read"])
        return Response(
            {"notifications": data, "unread": unread}, status=status.HTTP_200_OK
        )


class MarkNotificationsReadView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        tags=["Notifications"],
        security=[{"Bearer": []}],
        request_body=MarkReadSerializer,
    )
    def post(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = notification_services.mark_notifications_as_read(
            request.user.id, serializer.validated_data["ids"]
        )
        return Response({"updated": updated}, status=status.HTTP_200_OK)
