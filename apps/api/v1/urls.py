# apps/api/v1/urls.py
from django.urls import path, include

urlpatterns = [
    # =========================
    # Accounts
    # =========================
    path("subjects/", include("apps.domains.subjects.urls")),
    path("teachers/", include("apps.domains.teachers.urls")),
    path("students/", include("apps.domains.students.urls")),

    # =========================
    # Exams / attempts
    # =========================
    path("exams/", include("apps.domains.exams.urls")),
    path("", include("apps.domains.results.urls")),
]
