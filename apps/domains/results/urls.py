# apps/domains/results/urls.py
from django.urls import path

from .views.analysis_view import StudentAnalysisView
from .views.grade_trigger_view import SecretKeyGradeView
from .views.student_attempt_view import (
    AttemptQuestionView,
    StartExamView,
    StudentAttemptDetailView,
    StudentAttemptListView,
    SubmitAttemptView,
)
from .views.teacher_attempt_view import (
    ExamAttemptListView,
    MarkQuestionCorrectView,
    MarkResultsReadyView,
    OngoingExamsView,
    RecentSubmissionsView,
    TeacherAttemptDetailView,
)

urlpatterns = [
    # =========================
    # Student attempt flow
    # =========================
    path("exams/<int:exam_id>/start/", StartExamView.as_view(), name="exam-start"),
    path("attempts/", StudentAttemptListView.as_view(), name="attempt-list"),
    path("attempts/<int:attempt_id>/", StudentAttemptDetailView.as_view(), name="attempt-detail"),
    path("attempts/<int:attempt_id>/answers/", AttemptQuestionView.as_view(), name="attempt-answer"),
    path("attempts/<int:attempt_id>/submit/", SubmitAttemptView.as_view(), name="attempt-submit"),

    # =========================
    # Results
    # =========================
    path("exams/<int:exam_id>/analysis/", StudentAnalysisView.as_view(), name="exam-analysis"),
    path("exams/<int:exam_id>/grade/", SecretKeyGradeView.as_view(), name="exam-grade"),

    # =========================
    # Teacher review
    # =========================
    path("exams/<int:exam_id>/attempts/", ExamAttemptListView.as_view(), name="exam-attempts"),
    path(
        "exams/<int:exam_id>/mark-results-ready/",
        MarkResultsReadyView.as_view(),
        name="exam-mark-results-ready",
    ),
    path(
        "teacher/attempts/<int:attempt_id>/",
        TeacherAttemptDetailView.as_view(),
        name="teacher-attempt-detail",
    ),
    path(
        "teacher/attempts/<int:attempt_id>/questions/<int:question_id>/mark-correct/",
        MarkQuestionCorrectView.as_view(),
        name="teacher-mark-question-correct",
    ),
    path("teacher/ongoing-exams/", OngoingExamsView.as_view(), name="teacher-ongoing-exams"),
    path(
        "teacher/recent-submissions/",
        RecentSubmissionsView.as_view(),
        name="teacher-recent-submissions",
    ),
]
