from django.apps import AppConfig


class SalesConfig(AppConfig):
    name = "bizsuite.sales"
    label = "sales"
    verbose_name = "Sales"
