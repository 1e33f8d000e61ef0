from django.urls import path

from .views import (
    TeacherAddStudentsView,
    TeacherCreateView,
    TeacherFindStudentsView,
    TeacherProfileView,
    TeacherSubjectAssignView,
    TeacherSubjectsView,
)

urlpatterns = [
    path("", TeacherCreateView.as_view(), name="teacher-create"),
    path("<int:teacher_id>/subjects/", TeacherSubjectAssignView.as_view(), name="teacher-assign-subjects"),
    path("me/", TeacherProfileView.as_view(), name="teacher-profile"),
    path("me/subjects/", TeacherSubjectsView.as_view(), name="teacher-subjects"),
    path("me/add-students/", TeacherAddStudentsView.as_view(), name="teacher-add-students"),
    path("me/find-students/", TeacherFindStudentsView.as_view(), name="teacher-find-students"),
]
