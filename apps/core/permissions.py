#apps/core/permissions.py

from rest_framework.permissions import BasePermission


class IsAdminOrStaff(BasePermission):
    """
    Admin / operator only
    """
    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and (user.is_superuser or user.is_staff)
        )


class IsTeacher(BasePermission):
    """
    Teacher only
    - login required
    - User <-> Teacher OneToOne required
    """
    message = "Teacher account required."

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and hasattr(user, "teacher_profile")
        )


class IsStudent(BasePermission):
    """
    Student only
    - login required
    - User <-> Student OneToOne required
    """
    message = "Student account required."

    def has_permission(self, request, view):
        user = request.user
        return bool(
            user
            and user.is_authenticated
            and hasattr(user, "student_profile")
        )


class IsTeacherOrAdmin(BasePermission):
    message = "Teacher or admin account required."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(
            user.is_superuser
            or user.is_staff
            or hasattr(user, "teacher_profile")
        )
