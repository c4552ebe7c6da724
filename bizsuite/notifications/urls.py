from django.urls import path

from bizsuite.notifications.views import MarkNotificationsReadView, MyNotificationsView

urlpatterns = [
    path("notifications/", MyNotificationsView.as_view(), name="my-notifications"),
    path(
        "notifications/read/",
        MarkNotificationsReadView.as_view(),
        name="notifications-mark-read",
    ),
]
