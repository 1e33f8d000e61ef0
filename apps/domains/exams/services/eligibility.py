# PATH: apps/domains/exams/services/eligibility.py
"""
Eligibility Engine

Can this student start this exam right now?

Checks run in a fixed order and the first failure is the reason:
  1) exam exists and is active
  2) student enrolled in the exam subject, enrollment not expired
  3) allow-list membership (when the list is non-empty)
  4) access code (when one is configured): match, expiry, reuse, cap

evaluate_eligibility() is a pure read. The only write lives in
redeem_access_code(), a conditional UPDATE that cannot overrun the cap.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from django.db import models
from django.db.models import F
from django.utils import timezone

from apps.core.errors import (
    DomainError,
    ForbiddenError,
    NotFoundError,
    StateConflictError,
)
from apps.domains.exams.models import Exam, ExamAccessCode

logger = logging.getLogger(__name__)


class Reason(models.TextChoices):
    OK = "OK", "Allowed"
    NOT_FOUND = "NOT_FOUND", "Exam not found"
    NOT_ACTIVE = "NOT_ACTIVE", "Exam not active"
    NOT_ENROLLED = "NOT_ENROLLED", "Not enrolled in the subject"
    NOT_ALLOWED = "NOT_ALLOWED", "Not on the allow-list"
    ACCESS_CODE_INVALID = "ACCESS_CODE_INVALID", "Access code invalid"
    ACCESS_CODE_EXHAUSTED = "ACCESS_CODE_EXHAUSTED", "Access code exhausted"


_ERROR_BY_REASON = {
    Reason.NOT_FOUND: (NotFoundError, "Exam not found."),
    Reason.NOT_ACTIVE: (StateConflictError, "Exam is not active."),
    Reason.NOT_ENROLLED: (ForbiddenError, "Student is not enrolled in the exam subject."),
    Reason.NOT_ALLOWED: (ForbiddenError, "Student is not on the exam allow-list."),
    Reason.ACCESS_CODE_INVALID: (ForbiddenError, "Access code is invalid."),
    Reason.ACCESS_CODE_EXHAUSTED: (StateConflictError, "Access code can no longer be used."),
}


@dataclass(frozen=True)
class Eligibility:
    allowed: bool
    reason: Reason = Reason.OK

    def as_error(self) -> DomainError:
        error_cls, detail = _ERROR_BY_REASON[self.reason]
        return error_cls(detail, code=self.reason.value)

    def raise_for_reason(self) -> None:
        if not self.allowed:
            raise self.as_error()


def _access_code_of(exam: Exam) -> Optional[ExamAccessCode]:
    return ExamAccessCode.objects.filter(exam_id=exam.id).first()


def base_eligibility(student, exam: Optional[Exam], *, now=None) -> Eligibility:
    """
    Steps 1-3 (everything except the access code).
    """
    now = now or timezone.now()

    if exam is None:
        return Eligibility(False, Reason.NOT_FOUND)
    if not exam.is_active:
        return Eligibility(False, Reason.NOT_ACTIVE)

    if not student.is_enrolled_in(exam.subject_id, now=now):
        return Eligibility(False, Reason.NOT_ENROLLED)

    allowed = exam.allowed_students
    if allowed.exists() and not allowed.filter(id=student.id).exists():
        return Eligibility(False, Reason.NOT_ALLOWED)

    return Eligibility(True)


def access_code_eligibility(
    student,
    exam: Exam,
    provided_code: Optional[str],
    *,
    now=None,
) -> Eligibility:
    """
    Step 4. Exams without an access code always pass.
    """
    access_code = _access_code_of(exam)
    if access_code is None:
        return Eligibility(True)

    provided = (provided_code or "").strip()
    if not provided or not secrets.compare_digest(provided.encode(), access_code.code.encode()):
        return Eligibility(False, Reason.ACCESS_CODE_INVALID)
    if access_code.is_expired(now):
        return Eligibility(False, Reason.ACCESS_CODE_INVALID)

    already_used = access_code.used_by.filter(id=student.id).exists()
    if already_used and not access_code.allow_reuse:
        return Eligibility(False, Reason.ACCESS_CODE_EXHAUSTED)
    if access_code.is_exhausted:
        return Eligibility(False, Reason.ACCESS_CODE_EXHAUSTED)

    return Eligibility(True)


def evaluate_eligibility(
    student,
    exam: Optional[Exam],
    access_code: Optional[str] = None,
    *,
    now=None,
) -> Eligibility:
    now = now or timezone.now()
    result = base_eligibility(student, exam, now=now)
    if not result.allowed:
        return result
    return access_code_eligibility(student, exam, access_code, now=now)


def check_eligibility(*, student, exam_id: int, access_code: Optional[str] = None) -> Eligibility:
    exam = Exam.objects.filter(id=exam_id).first()
    return evaluate_eligibility(student, exam, access_code)


def redeem_access_code(*, exam: Exam, student) -> bool:
    """
    Record a redemption. Returns False when the exam has no access code.

    A student redeeming again (allow_reuse) keeps their slot.
    Must run inside the caller's transaction.
    """
    access_code = _access_code_of(exam)
    if access_code is None:
        return False

    if access_code.used_by.filter(id=student.id).exists():
        if not access_code.allow_reuse:
            raise Eligibility(False, Reason.ACCESS_CODE_EXHAUSTED).as_error()
        return True

    updated = (
        ExamAccessCode.objects
        .filter(id=access_code.id, usage_count__lt=F("max_usage_count"))
        .update(usage_count=F("usage_count") + 1, updated_at=timezone.now())
    )
    if updated == 0:
        logger.info(
            "[redeem_access_code] exhausted exam_id=%s student_id=%s",
            exam.id,
            student.id,
        )
        raise Eligibility(False, Reason.ACCESS_CODE_EXHAUSTED).as_error()

    access_code.used_by.add(student)
    logger.info("[redeem_access_code] exam_id=%s student_id=%s", exam.id, student.id)
    return True
