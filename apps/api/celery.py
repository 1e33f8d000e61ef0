# apps/api/celery.py

from celery import Celery

# settings are not chosen here
# DJANGO_SETTINGS_MODULE must be injected from outside

app = Celery("exam_backend")

app.config_from_object(
    "django.conf:settings",
    namespace="CELERY",
)

# discover tasks.py modules of INSTALLED_APPS
app.autodiscover_tasks()
