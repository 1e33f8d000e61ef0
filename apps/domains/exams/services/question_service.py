# PATH: apps/domains/exams/services/question_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction

from apps.core.errors import (
    InvariantViolation,
    NotFoundError,
    StateConflictError,
    ValidationFailed,
)
from apps.domains.exams.models import Answer, Exam, ExamSettings, Option, Question
from apps.domains.exams.services.activation import validate_for_activation
from apps.domains.exams.services.exam_service import get_exam_for_teacher

logger = logging.getLogger(__name__)


QUESTION_FIELDS = (
    "text",
    "score",
    "hint",
    "explanation",
    "media_url",
    "media_type",
    "boolean_answer",
)

OPTION_FIELDS = ("text", "is_correct", "media_url", "media_type")


# ---------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------

def get_question_for_teacher(teacher, exam_id: int, question_id: int, *, for_update: bool = False):
    exam = get_exam_for_teacher(teacher, exam_id, for_update=for_update)
    question = Question.objects.filter(id=question_id, exam=exam).first()
    if question is None:
        raise NotFoundError("Question not found.", context={"question_id": question_id})
    return exam, question


def _revalidate_if_live(exam: Exam) -> None:
    """
    A live exam with instant results must stay gradable after every edit.
    Raising here rolls the edit back.
    """
    if not exam.is_active:
        return
    exam_settings = ExamSettings.objects.filter(exam=exam).first()
    if exam_settings and exam_settings.show_result_at_end:
        validate_for_activation(exam)


def _ensure_single_correct(question: Question) -> None:
    if question.type != Question.Type.OBJ:
        return
    correct = Option.objects.filter(question=question, is_correct=True).count()
    if correct > 1:
        raise InvariantViolation(
            "An obj question may have only one correct option.",
            code="MULTIPLE_CORRECT_OPTIONS",
            context={"question_id": question.id},
        )


def _ensure_uses_options(question: Question) -> None:
    if not question.uses_options:
        raise ValidationFailed(
            "Options are only allowed on obj / mcq questions.",
            code="OPTIONS_NOT_ALLOWED",
            context={"question_id": question.id},
        )


def _clean_option(data: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(data) - set(OPTION_FIELDS))
    if unknown:
        raise ValidationFailed("Unknown option field.", code="UNKNOWN_FIELD", context={"fields": unknown})
    text = (data.get("text") or "").strip()
    if not text:
        raise ValidationFailed("Option text is required.", code="OPTION_TEXT_REQUIRED")
    return {**data, "text": text}


# ---------------------------------------------------------------------
# questions
# ---------------------------------------------------------------------

def list_questions(exam: Exam):
    return (
        Question.objects.filter(exam=exam)
        .select_related("answer")
        .prefetch_related("options")
        .order_by("id")
    )


@transaction.atomic
def create_question(
    *,
    teacher,
    exam_id: int,
    type: str,
    text: str,
    score: int = 1,
    hint: str = "",
    explanation: str = "",
    media_url: str = "",
    media_type: str = "",
    boolean_answer: Optional[bool] = None,
    options: Optional[List[Dict[str, Any]]] = None,
    answer: Optional[str] = None,
) -> Question:
    exam = get_exam_for_teacher(teacher, exam_id, for_update=True)

    if type not in Question.Type.values:
        raise ValidationFailed("Unknown question type.", code="INVALID_TYPE", context={"type": type})
    if not (text or "").strip():
        raise ValidationFailed("Question text is required.", code="TEXT_REQUIRED")

    is_boolean = type == Question.Type.BOOLEAN
    if is_boolean and boolean_answer is None:
        raise ValidationFailed(
            "boolean_answer is required for boolean questions.",
            code="BOOLEAN_ANSWER_REQUIRED",
        )

    question = Question.objects.create(
        exam=exam,
        type=type,
        text=text.strip(),
        score=score,
        hint=hint or "",
        explanation=explanation or "",
        media_url=media_url or "",
        media_type=media_type or "",
        boolean_answer=boolean_answer if is_boolean else None,
    )

    if options:
        _ensure_uses_options(question)
        Option.objects.bulk_create(
            [Option(question=question, **_clean_option(o)) for o in options]
        )
        _ensure_single_correct(question)

    if answer is not None:
        _write_answer(question, answer)

    _revalidate_if_live(exam)

    logger.info(
        "[create_question] exam_id=%s question_id=%s type=%s",
        exam.id,
        question.id,
        type,
    )
    return question


@transaction.atomic
def update_question(*, teacher, exam_id: int, question_id: int, **fields) -> Question:
    """
    type is fixed once created; options / answer have their own operations.
    """
    exam, question = get_question_for_teacher(teacher, exam_id, question_id, for_update=True)

    if "type" in fields and fields["type"] != question.type:
        raise ValidationFailed("Question type cannot change.", code="TYPE_IMMUTABLE")
    fields.pop("type", None)

    unknown = sorted(set(fields) - set(QUESTION_FIELDS))
    if unknown:
        raise ValidationFailed("Unknown question field.", code="UNKNOWN_FIELD", context={"fields": unknown})

    if question.type != Question.Type.BOOLEAN:
        fields.pop("boolean_answer", None)
    elif "boolean_answer" in fields and fields["boolean_answer"] is None:
        raise ValidationFailed(
            "boolean_answer is required for boolean questions.",
            code="BOOLEAN_ANSWER_REQUIRED",
        )

    for key, value in fields.items():
        setattr(question, key, value)
    if not (question.text or "").strip():
        raise ValidationFailed("Question text is required.", code="TEXT_REQUIRED")
    question.save()

    _revalidate_if_live(exam)
    return question


@transaction.atomic
def delete_question(*, teacher, exam_id: int, question_id: int) -> None:
    """
    Rejected on a live exam. Attempt entries for the question go with it
    and completed attempts that held one are rescored.
    """
    from apps.domains.results.models import AttemptAnswer, ExamAttempt
    from apps.domains.results.services.grading_service import recompute_score

    exam, question = get_question_for_teacher(teacher, exam_id, question_id, for_update=True)
    if exam.is_active:
        raise StateConflictError(
            "Questions of an active exam cannot be deleted.",
            code="EXAM_ACTIVE",
            context={"exam_id": exam.id},
        )

    attempt_ids = list(
        AttemptAnswer.objects.filter(question=question).values_list("attempt_id", flat=True)
    )

    AttemptAnswer.objects.filter(question=question).delete()
    Option.objects.filter(question=question).delete()
    Answer.objects.filter(question=question).delete()
    question.delete()

    rescored = ExamAttempt.objects.select_for_update().filter(
        id__in=attempt_ids, status=ExamAttempt.Status.COMPLETED
    )
    for attempt in rescored:
        recompute_score(attempt)

    logger.info(
        "[delete_question] exam_id=%s question_id=%s rescored=%s",
        exam.id,
        question_id,
        len(attempt_ids),
    )


# ---------------------------------------------------------------------
# options
# ---------------------------------------------------------------------

@transaction.atomic
def create_options(
    *,
    teacher,
    exam_id: int,
    question_id: int,
    options: List[Dict[str, Any]],
) -> List[Option]:
    exam, question = get_question_for_teacher(teacher, exam_id, question_id, for_update=True)
    _ensure_uses_options(question)
    if not options:
        raise ValidationFailed("At least one option is required.", code="OPTIONS_REQUIRED")

    created = [Option.objects.create(question=question, **_clean_option(o)) for o in options]
    _ensure_single_correct(question)
    _revalidate_if_live(exam)

    logger.info(
        "[create_options] question_id=%s count=%s",
        question.id,
        len(created),
    )
    return created


def _get_option(question: Question, option_id: int) -> Option:
    option = Option.objects.filter(id=option_id, question=question).first()
    if option is None:
        raise NotFoundError("Option not found.", context={"option_id": option_id})
    return option


@transaction.atomic
def update_option(
    *,
    teacher,
    exam_id: int,
    question_id: int,
    option_id: int,
    **fields,
) -> Option:
    exam, question = get_question_for_teacher(teacher, exam_id, question_id, for_update=True)
    option = _get_option(question, option_id)

    unknown = sorted(set(fields) - set(OPTION_FIELDS))
    if unknown:
        raise ValidationFailed("Unknown option field.", code="UNKNOWN_FIELD", context={"fields": unknown})
    for key, value in fields.items():
        setattr(option, key, value)
    if not (option.text or "").strip():
        raise ValidationFailed("Option text is required.", code="OPTION_TEXT_REQUIRED")
    option.save()

    _ensure_single_correct(question)
    _revalidate_if_live(exam)
    return option


@transaction.atomic
def remove_options(
    *,
    teacher,
    exam_id: int,
    question_id: int,
    option_ids: Iterable[int],
) -> int:
    exam, question = get_question_for_teacher(teacher, exam_id, question_id, for_update=True)
    ids = sorted({int(x) for x in option_ids})
    found = set(
        Option.objects.filter(question=question, id__in=ids).values_list("id", flat=True)
    )
    missing = sorted(set(ids) - found)
    if missing:
        raise NotFoundError("Option not found.", context={"option_ids": missing})

    deleted, _ = Option.objects.filter(question=question, id__in=ids).delete()
    _revalidate_if_live(exam)

    logger.info("[remove_options] question_id=%s option_ids=%s", question.id, ids)
    return deleted


def delete_option(*, teacher, exam_id: int, question_id: int, option_id: int) -> None:
    remove_options(
        teacher=teacher,
        exam_id=exam_id,
        question_id=question_id,
        option_ids=[option_id],
    )


# ---------------------------------------------------------------------
# reference answer
# ---------------------------------------------------------------------

def _write_answer(question: Question, text: str) -> Answer:
    if not question.is_free_text:
        raise ValidationFailed(
            "Reference answers are only allowed on short / long answer questions.",
            code="ANSWER_NOT_ALLOWED",
            context={"question_id": question.id},
        )
    answer, _ = Answer.objects.update_or_create(
        question=question,
        defaults={"text": (text or "").strip()},
    )
    return answer


@transaction.atomic
def set_answer(*, teacher, exam_id: int, question_id: int, text: str) -> Answer:
    exam, question = get_question_for_teacher(teacher, exam_id, question_id, for_update=True)
    answer = _write_answer(question, text)
    _revalidate_if_live(exam)
    logger.info("[set_answer] question_id=%s", question.id)
    return answer


def get_answer(*, teacher, exam_id: int, question_id: int) -> Answer:
    _, question = get_question_for_teacher(teacher, exam_id, question_id)
    answer = Answer.objects.filter(question=question).first()
    if answer is None:
        raise NotFoundError("Answer not found.", context={"question_id": question_id})
    return answer
