from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    name = "bizsuite.notifications"
    label = "notifications"

    def ready(self):
        # connect workflow signal receivers
        from . import receivers  # noqa: F401
