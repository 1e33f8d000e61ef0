from django.apps import AppConfig


class ResultsConfig(AppConfig):
    name = "apps.domains.results"
    label = "results"
