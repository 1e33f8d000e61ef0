from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.errors import NotFoundError
from apps.core.permissions import IsAdminOrStaff, IsTeacher
from apps.domains.students.serializers import StudentSerializer
from apps.domains.teachers.models import Teacher
from apps.domains.teachers.serializers import (
    StudentIdsSerializer,
    SubjectIdsSerializer,
    TeacherCreateSerializer,
    TeacherSerializer,
)
from apps.domains.teachers.services import (
    add_students_to_teacher,
    assign_subjects_to_teacher,
    create_teacher,
    students_offering_my_subjects,
)


class TeacherCreateView(APIView):
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request):
        ser = TeacherCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        teacher = create_teacher(**ser.validated_data)
        return Response(TeacherSerializer(teacher).data, status=status.HTTP_201_CREATED)


class TeacherSubjectAssignView(APIView):
    """
    Admin assigns subjects to a teacher.
    """
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request, teacher_id: int):
        teacher = Teacher.objects.filter(id=int(teacher_id)).first()
        if teacher is None:
            raise NotFoundError("Teacher not found.")
        ser = SubjectIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        assign_subjects_to_teacher(teacher=teacher, subject_ids=ser.validated_data["subject_ids"])
        return Response(TeacherSerializer(teacher).data)


class TeacherProfileView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        return Response(TeacherSerializer(request.user.teacher_profile).data)


class TeacherSubjectsView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        from apps.domains.subjects.serializers import SubjectSerializer

        subjects = request.user.teacher_profile.subjects.order_by("name")
        return Response(SubjectSerializer(subjects, many=True).data)


class TeacherAddStudentsView(APIView):
    permission_classes = [IsAuthenticated, IsTeacher]

    def post(self, request):
        ser = StudentIdsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        students = add_students_to_teacher(
            teacher=request.user.teacher_profile,
            student_ids=ser.validated_data["student_ids"],
        )
        return Response(StudentSerializer(students, many=True).data)


class TeacherFindStudentsView(APIView):
    """
    Students taking at least one of my subjects.
    """
    permission_classes = [IsAuthenticated, IsTeacher]

    def get(self, request):
        qs = students_offering_my_subjects(request.user.teacher_profile)
        return Response(StudentSerializer(qs, many=True).data)
