# PATH: apps/domains/results/views/grade_trigger_view.py
from __future__ import annotations

from dataclasses import asdict

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.domains.results.serializers.exam_attempt import SecretKeyGradeSerializer
from apps.domains.results.services.grading_service import grade_with_secret_key

# Contract:
#   POST /api/v1/exams/{exam_id}/grade/  {"secret_key": "...", "student_id": 1}
#
# No session. The exam secret key is the only credential.


class SecretKeyGradeView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request, exam_id: int):
        ser = SecretKeyGradeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        outcome = grade_with_secret_key(
            exam_id=int(exam_id),
            secret_key=ser.validated_data["secret_key"],
            student_id=ser.validated_data["student_id"],
        )
        return Response(asdict(outcome))
