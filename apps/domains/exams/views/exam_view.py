# apps/domains/exams/views/exam_view.py
"""
Teacher exam management.

Every lookup is scoped to request.user.teacher_profile; another teacher's
exam answers 404.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsTeacher
from apps.domains.exams.serializers.exam import (
    ExamActiveSerializer,
    ExamCreateSerializer,
    ExamSerializer,
    ExamUpdateSerializer,
)
from apps.domains.exams.services.activation import set_exam_active, toggle_exam_active
from apps.domains.exams.services.exam_service import (
    EXAM_FIELDS,
    create_exam,
    delete_exam,
    exams_for_teacher,
    get_exam_for_teacher,
    update_exam,
)


class TeacherExamListCreateView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        qs = exams_for_teacher(request.user.teacher_profile)
        return Response(ExamSerializer(qs, many=True).data)

    def post(self, request):
        ser = ExamCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        exam = create_exam(
            teacher=request.user.teacher_profile,
            subject_id=data["subject_id"],
            title=data["title"],
            description=data.get("description", ""),
            instructions=data.get("instructions", ""),
            allowed_student_ids=data.get("allowed_student_ids", []),
            settings=dict(data.get("settings") or {}),
            access_code=dict(data.get("access_code") or {}) or None,
        )
        return Response(ExamSerializer(exam).data, status=status.HTTP_201_CREATED)


class TeacherExamDetailView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request, exam_id: int):
        exam = get_exam_for_teacher(request.user.teacher_profile, int(exam_id))
        return Response(ExamSerializer(exam).data)

    def patch(self, request, exam_id: int):
        ser = ExamUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        exam = update_exam(
            teacher=request.user.teacher_profile,
            exam_id=int(exam_id),
            fields={k: v for k, v in data.items() if k in EXAM_FIELDS},
            subject_id=data.get("subject_id"),
            allowed_student_ids=data.get("allowed_student_ids"),
            settings=dict(data.get("settings") or {}),
            access_code=dict(data.get("access_code") or {}) or None,
        )
        return Response(ExamSerializer(exam).data)

    def delete(self, request, exam_id: int):
        delete_exam(teacher=request.user.teacher_profile, exam_id=int(exam_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class TeacherExamActivationView(APIView):
    """
    POST {}                  : toggle
    POST {"is_active": bool} : set explicitly
    """
    permission_classes = [IsAuthenticated, IsTeacher]

    def post(self, request, exam_id: int):
        exam = get_exam_for_teacher(request.user.teacher_profile, int(exam_id))
        ser = ExamActiveSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        if "is_active" in ser.validated_data:
            exam = set_exam_active(exam=exam, active=ser.validated_data["is_active"])
        else:
            exam = toggle_exam_active(exam=exam)
        return Response(ExamSerializer(exam).data)
