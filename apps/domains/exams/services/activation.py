# PATH: apps/domains/exams/services/activation.py
"""
Exam activation gate.

When show_result_at_end is on, every question must be gradable before the
exam may go live:
  - obj         : at least one correct option
  - mcq         : at least two correct options
  - short/long  : a reference answer of EXAM_FREE_TEXT_MIN_ANSWER_LENGTH+ characters

The gate only runs on the inactive -> active flip.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q

from apps.core.errors import StateConflictError
from apps.domains.exams.models import Answer, Exam, ExamSettings, Question

logger = logging.getLogger(__name__)


MIN_CORRECT_OPTIONS = {
    Question.Type.OBJ: 1,
    Question.Type.MCQ: 2,
}


def _min_answer_length() -> int:
    return int(getattr(settings, "EXAM_FREE_TEXT_MIN_ANSWER_LENGTH", 3))


def _missing_answer(question: Question, detail: str) -> StateConflictError:
    return StateConflictError(
        detail,
        code="MISSING_ANSWER",
        context={"question_id": question.id},
    )


def validate_for_activation(exam: Exam) -> None:
    """
    Raise MISSING_ANSWER for the first question that cannot be graded.
    """
    questions = (
        Question.objects.filter(exam=exam)
        .annotate(correct_count=Count("options", filter=Q(options__is_correct=True)))
        .order_by("id")
    )
    reference = {
        a.question_id: a.text
        for a in Answer.objects.filter(question__exam=exam).only("question_id", "text")
    }
    min_length = _min_answer_length()

    for q in questions:
        if q.type in MIN_CORRECT_OPTIONS:
            needed = MIN_CORRECT_OPTIONS[q.type]
            if q.correct_count < needed:
                raise _missing_answer(
                    q, f"Question needs at least {needed} correct option(s)."
                )
        elif q.is_free_text:
            text = (reference.get(q.id) or "").strip()
            if len(text) < min_length:
                raise _missing_answer(
                    q, f"Question needs a reference answer of at least {min_length} characters."
                )


@transaction.atomic
def set_exam_active(*, exam: Exam, active: bool) -> Exam:
    """
    Flip is_active. Validation and the write share one transaction,
    so a rejected activation leaves the row untouched.
    """
    exam = Exam.objects.select_for_update().get(id=exam.id)
    active = bool(active)

    if exam.is_active == active:
        return exam

    if active:
        exam_settings, _ = ExamSettings.objects.get_or_create(exam=exam)
        if exam_settings.show_result_at_end:
            validate_for_activation(exam)

    exam.is_active = active
    exam.save(update_fields=["is_active", "updated_at"])

    logger.info("[set_exam_active] exam_id=%s active=%s", exam.id, active)
    return exam


@transaction.atomic
def toggle_exam_active(*, exam: Exam) -> Exam:
    current = Exam.objects.select_for_update().values_list("is_active", flat=True).get(id=exam.id)
    return set_exam_active(exam=exam, active=not current)
