from django.apps import AppConfig


class TeachersConfig(AppConfig):
    name = "apps.domains.teachers"
    label = "teachers"
