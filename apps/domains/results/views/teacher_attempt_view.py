# PATH: apps/domains/results/views/teacher_attempt_view.py
from __future__ import annotations

from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsTeacher
from apps.domains.results.filters import ExamAttemptFilter
from apps.domains.results.serializers.exam_attempt import (
    AttemptAnswerSerializer,
    AttemptLogSerializer,
    ExamAttemptSerializer,
    ManualGradeSerializer,
    MarkResultsReadySerializer,
)
from apps.domains.results.services.attempt_service import (
    attempts_for_exam,
    get_attempt_for_teacher,
    mark_question_correct,
    mark_results_ready,
    update_attempt,
)
from apps.domains.results.services.dashboard_service import (
    ongoing_exams_for_teacher,
    recent_submissions_for_teacher,
)


def _teacher(request):
    return request.user.teacher_profile


class ExamAttemptListView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, exam_id: int):
        qs = attempts_for_exam(teacher=_teacher(request), exam_id=int(exam_id))
        filterset = ExamAttemptFilter(request.query_params, queryset=qs)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        qs = filterset.qs.prefetch_related("answers")
        return Response(ExamAttemptSerializer(qs, many=True).data)


class TeacherAttemptDetailView(APIView):
    """
    GET   : attempt with answers and logs
    PATCH : manual score / feedback
    """
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, attempt_id: int):
        attempt = get_attempt_for_teacher(_teacher(request), int(attempt_id))
        data = ExamAttemptSerializer(attempt).data
        data["logs"] = AttemptLogSerializer(attempt.logs.all(), many=True).data
        return Response(data)

    def patch(self, request, attempt_id: int):
        ser = ManualGradeSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        attempt = update_attempt(
            teacher=_teacher(request),
            attempt_id=int(attempt_id),
            score=ser.validated_data.get("score"),
            teacher_feedback=ser.validated_data.get("teacher_feedback"),
        )
        return Response(ExamAttemptSerializer(attempt).data)


class MarkQuestionCorrectView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def post(self, request, attempt_id: int, question_id: int):
        entry = mark_question_correct(
            teacher=_teacher(request),
            attempt_id=int(attempt_id),
            question_id=int(question_id),
        )
        return Response(AttemptAnswerSerializer(entry).data)


class MarkResultsReadyView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def post(self, request, exam_id: int):
        ser = MarkResultsReadySerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        updated = mark_results_ready(
            teacher=_teacher(request),
            exam_id=int(exam_id),
            student_ids=None if data.get("all") else data.get("student_ids"),
            notify_via_email=data.get("notify_via_email", False),
        )
        return Response({"updated": updated})


class OngoingExamsView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        return Response(ongoing_exams_for_teacher(_teacher(request)))


class RecentSubmissionsView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        qs = recent_submissions_for_teacher(_teacher(request))
        return Response(ExamAttemptSerializer(qs, many=True).data)
