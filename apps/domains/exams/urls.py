# apps/domains/exams/urls.py
from django.urls import path

from .views.exam_view import (
    TeacherExamActivationView,
    TeacherExamDetailView,
    TeacherExamListCreateView,
)
from .views.question_view import (
    AnswerView,
    OptionDetailView,
    OptionListView,
    QuestionDetailView,
    QuestionListCreateView,
)
from .views.student_exam_view import (
    StudentAvailableExamListView,
    StudentExamDetailView,
    StudentExamEligibilityView,
)

urlpatterns = [
    # =========================
    # Teacher
    # =========================
    path("", TeacherExamListCreateView.as_view(), name="exam-list"),
    path("<int:exam_id>/", TeacherExamDetailView.as_view(), name="exam-detail"),
    path("<int:exam_id>/activation/", TeacherExamActivationView.as_view(), name="exam-activation"),
    path("<int:exam_id>/questions/", QuestionListCreateView.as_view(), name="question-list"),
    path(
        "<int:exam_id>/questions/<int:question_id>/",
        QuestionDetailView.as_view(),
        name="question-detail",
    ),
    path(
        "<int:exam_id>/questions/<int:question_id>/options/",
        OptionListView.as_view(),
        name="option-list",
    ),
    path(
        "<int:exam_id>/questions/<int:question_id>/options/<int:option_id>/",
        OptionDetailView.as_view(),
        name="option-detail",
    ),
    path(
        "<int:exam_id>/questions/<int:question_id>/answer/",
        AnswerView.as_view(),
        name="question-answer",
    ),

    # =========================
    # Student
    # =========================
    path("available/", StudentAvailableExamListView.as_view(), name="student-exam-available"),
    path("<int:exam_id>/view/", StudentExamDetailView.as_view(), name="student-exam-detail"),
    path(
        "<int:exam_id>/eligibility/",
        StudentExamEligibilityView.as_view(),
        name="student-exam-eligibility",
    ),
]
