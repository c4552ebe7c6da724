from django.apps import AppConfig


class UsersConfig(AppConfig):
    name = "bizsuite.users"
    label = "users"
