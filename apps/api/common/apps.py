from django.apps import AppConfig


class CommonConfig(AppConfig):
    name = "apps.api.common"
    label = "common"
