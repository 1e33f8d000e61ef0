from __future__ import annotations

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsStudent
from apps.domains.exams.models import Exam
from apps.domains.exams.serializers.exam import StudentExamSerializer
from apps.domains.exams.services.eligibility import base_eligibility, check_eligibility
from apps.domains.exams.services.exam_service import available_exams_for_student


class StudentAvailableExamListView(APIView):
    """
    Exams visible to the student

    - active only
    - subject enrollment not expired
    - allow-list respected (access codes are checked at start)
    """

    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        qs = available_exams_for_student(request.user.student_profile)
        return Response(StudentExamSerializer(qs, many=True).data)


class StudentExamDetailView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request, exam_id: int):
        exam = Exam.objects.filter(id=int(exam_id)).first()
        base_eligibility(request.user.student_profile, exam).raise_for_reason()
        return Response(StudentExamSerializer(exam).data)


class StudentExamEligibilityView(APIView):
    """
    Dry run of the start checks; nothing is redeemed.
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, exam_id: int):
        result = check_eligibility(
            student=request.user.student_profile,
            exam_id=int(exam_id),
            access_code=request.data.get("access_code"),
        )
        return Response({"allowed": result.allowed, "reason": result.reason.value})
