from django.apps import AppConfig


class SubjectsConfig(AppConfig):
    name = "apps.domains.subjects"
    label = "subjects"
