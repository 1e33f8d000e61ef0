from django.urls import path

from .views import StudentCreateView, StudentProfileView

urlpatterns = [
    path("", StudentCreateView.as_view(), name="student-create"),
    path("me/", StudentProfileView.as_view(), name="student-profile"),
]
