# PATH: apps/domains/results/views/student_attempt_view.py
from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsStudent
from apps.core.roles import Role
from apps.domains.exams.models import ExamSettings
from apps.domains.exams.projections import project_questions
from apps.domains.exams.services.question_service import list_questions
from apps.domains.results.serializers.exam_attempt import (
    AttemptAnswerSerializer,
    AttemptQuestionSerializer,
    StartExamSerializer,
    StudentExamAttemptSerializer,
)
from apps.domains.results.services.attempt_service import (
    attempt_deadline,
    attempt_question,
    attempts_for_student,
    get_attempt_for_student,
    start_exam,
    submit_attempt,
)


def _attempt_payload(attempt):
    """
    Attempt plus the student projection of its questions.
    Shuffling is seeded by the attempt id so reloads keep the order.
    """
    data = StudentExamAttemptSerializer(attempt).data
    exam = attempt.exam
    if exam is None:
        data["questions"] = []
        data["deadline"] = None
        return data

    exam_settings = ExamSettings.objects.filter(exam=exam).first()
    data["questions"] = project_questions(
        list_questions(exam),
        Role.STUDENT,
        shuffle_questions=bool(exam_settings and exam_settings.shuffle_questions),
        shuffle_options=bool(exam_settings and exam_settings.shuffle_options),
        seed=attempt.id,
    )
    data["deadline"] = attempt_deadline(attempt, exam_settings)
    return data


class StartExamView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, exam_id: int):
        ser = StartExamSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        out = start_exam(
            student=request.user.student_profile,
            exam_id=int(exam_id),
            access_code=ser.validated_data.get("access_code"),
        )
        return Response(
            {"created": out.created, "attempt": _attempt_payload(out.attempt)},
            status=status.HTTP_201_CREATED if out.created else status.HTTP_200_OK,
        )


class StudentAttemptListView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        qs = attempts_for_student(request.user.student_profile).prefetch_related("answers")
        return Response(StudentExamAttemptSerializer(qs, many=True).data)


class StudentAttemptDetailView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request, attempt_id: int):
        attempt = get_attempt_for_student(request.user.student_profile, int(attempt_id))
        return Response(_attempt_payload(attempt))


class AttemptQuestionView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, attempt_id: int):
        ser = AttemptQuestionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        entry = attempt_question(
            student=request.user.student_profile,
            attempt_id=int(attempt_id),
            question_id=ser.validated_data["question_id"],
            answer=ser.validated_data["answer"],
        )
        data = AttemptAnswerSerializer(entry).data
        # correctness is not revealed while the attempt runs
        data.pop("is_correct", None)
        data.pop("marked_by_teacher", None)
        return Response(data)


class SubmitAttemptView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, attempt_id: int):
        out = submit_attempt(
            student=request.user.student_profile,
            attempt_id=int(attempt_id),
        )
        return Response(StudentExamAttemptSerializer(out.attempt).data)
