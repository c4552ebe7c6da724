from django.apps import AppConfig


class RequisitionsConfig(AppConfig):
    name = "bizsuite.requisitions"
    label = "requisitions"
    verbose_name = "Requisitions"
