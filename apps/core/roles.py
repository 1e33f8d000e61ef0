# PATH: apps/core/roles.py
"""
Role resolution for an authenticated user.

The role is never stored on the user row. It is derived from the profile
rows attached to ``auth.User``:

- admin   : is_staff / is_superuser
- teacher : has ``teacher_profile``
- student : has ``student_profile``
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from django.core.exceptions import ObjectDoesNotExist

from apps.core.errors import ForbiddenError


class Role:
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"

    CHOICES = (ADMIN, TEACHER, STUDENT)


@dataclass(frozen=True)
class Actor:
    user: Any
    role: str
    teacher: Optional[Any] = None
    student: Optional[Any] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


def _profile(user, attr: str):
    try:
        return getattr(user, attr)
    except ObjectDoesNotExist:
        return None


def resolve_actor(user) -> Actor:
    if user is None or not getattr(user, "is_authenticated", False):
        raise ForbiddenError("Authentication required.", code="UNAUTHENTICATED")

    teacher = _profile(user, "teacher_profile")
    student = _profile(user, "student_profile")

    # a teacher profile wins over the staff flag so staff teachers act as teachers
    if teacher is not None:
        return Actor(user=user, role=Role.TEACHER, teacher=teacher)
    if user.is_superuser or user.is_staff:
        return Actor(user=user, role=Role.ADMIN)
    if student is not None:
        return Actor(user=user, role=Role.STUDENT, student=student)

    raise ForbiddenError("No role is attached to this account.", code="NO_ROLE")
