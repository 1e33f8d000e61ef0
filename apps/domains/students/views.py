from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsStudent, IsTeacherOrAdmin
from apps.domains.students.serializers import (
    StudentCreateSerializer,
    StudentProfileUpdateSerializer,
    StudentSerializer,
)
from apps.domains.students.services import create_student, update_student_profile


class StudentCreateView(APIView):
    """
    Admin or teacher creates a student.
    A teacher may only enroll the student in subjects they teach.
    """
    permission_classes = [IsAuthenticated, IsTeacherOrAdmin]

    def post(self, request):
        ser = StudentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        created_by = getattr(request.user, "teacher_profile", None)
        student = create_student(created_by=created_by, **ser.validated_data)
        return Response(StudentSerializer(student).data, status=status.HTTP_201_CREATED)


class StudentProfileView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        return Response(StudentSerializer(request.user.student_profile).data)

    def patch(self, request):
        ser = StudentProfileUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        student = update_student_profile(
            student=request.user.student_profile, **ser.validated_data
        )
        return Response(StudentSerializer(student).data)
