# PATH: apps/domains/results/views/analysis_view.py
from __future__ import annotations

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.errors import ValidationFailed
from apps.core.roles import resolve_actor
from apps.domains.results.services.analysis_service import get_student_analysis


class StudentAnalysisView(APIView):
    """
    Student : own analysis, once results are released
    Teacher : ?student_id=<id> on their own exam
    Admin   : ?student_id=<id> on any exam
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, exam_id: int):
        actor = resolve_actor(request.user)

        student_id = None
        if not actor.is_student:
            raw = request.query_params.get("student_id")
            try:
                student_id = int(raw)
            except (TypeError, ValueError):
                raise ValidationFailed(
                    "student_id query parameter is required.",
                    code="STUDENT_ID_REQUIRED",
                ) from None

        data = get_student_analysis(actor=actor, exam_id=int(exam_id), student_id=student_id)
        return Response(data)
