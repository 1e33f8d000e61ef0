# PATH: apps/domains/results/services/grading_service.py
"""
Grading engine.

- boolean   : "true"/"false" (case-insensitive) against boolean_answer
- obj       : submitted option id == the single correct option
- mcq       : submitted id set == full correct set (no partial credit)
- short/long: normalized text equality with the reference answer

score = sum(question.score) over correct entries.

Grading recomputes every entry from scratch, so running it twice on the
same inputs gives the same result. Entries a teacher marked correct stay
correct.
"""
from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from apps.core.errors import ForbiddenError, NotFoundError, StateConflictError
from apps.domains.exams.models import Answer, Exam, Option, Question
from apps.domains.results.models import AttemptAnswer, AttemptLog, ExamAttempt
from apps.domains.results.services.attempt_log import append_log

logger = logging.getLogger(__name__)


_WS = re.compile(r"\s+")


@dataclass(frozen=True)
class QuestionGrade:
    question_id: int
    is_correct: bool
    score_awarded: float


@dataclass(frozen=True)
class GradeOutcome:
    attempt_id: int
    score: float
    total_possible: float
    per_question: Tuple[QuestionGrade, ...]


# ---------------------------------------------------------------------
# pure comparisons
# ---------------------------------------------------------------------

def normalize_text(value: Optional[str]) -> str:
    return _WS.sub(" ", (value or "").strip()).casefold()


def parse_option_ids(raw: Optional[str]) -> Optional[FrozenSet[int]]:
    """
    "3, 5" -> {3, 5}. None when any part is not an integer.
    """
    parts = [p.strip() for p in (raw or "").split(",") if p.strip()]
    try:
        return frozenset(int(p) for p in parts)
    except ValueError:
        return None


def is_answer_correct(
    question: Question,
    raw: Optional[str],
    *,
    correct_option_ids: FrozenSet[int] = frozenset(),
    reference_text: Optional[str] = None,
) -> bool:
    qtype = question.type

    if qtype == Question.Type.BOOLEAN:
        value = (raw or "").strip().lower()
        if value not in ("true", "false") or question.boolean_answer is None:
            return False
        return (value == "true") == bool(question.boolean_answer)

    if qtype == Question.Type.OBJ:
        submitted = parse_option_ids(raw)
        if not submitted or len(submitted) != 1 or len(correct_option_ids) != 1:
            return False
        return submitted == correct_option_ids

    if qtype == Question.Type.MCQ:
        submitted = parse_option_ids(raw)
        if not submitted or not correct_option_ids:
            return False
        return submitted == correct_option_ids

    if qtype in Question.FREE_TEXT_TYPES:
        expected = normalize_text(reference_text)
        if not expected:
            return False
        return normalize_text(raw) == expected

    return False


# ---------------------------------------------------------------------
# grading
# ---------------------------------------------------------------------

def _answer_keys(exam: Exam) -> Tuple[Dict[int, FrozenSet[int]], Dict[int, str]]:
    correct: Dict[int, set] = {}
    for question_id, option_id in Option.objects.filter(
        question__exam=exam, is_correct=True
    ).values_list("question_id", "id"):
        correct.setdefault(question_id, set()).add(option_id)

    reference = dict(
        Answer.objects.filter(question__exam=exam).values_list("question_id", "text")
    )
    return {k: frozenset(v) for k, v in correct.items()}, reference


def total_possible_score(exam: Optional[Exam]) -> float:
    if exam is None:
        return 0
    return float(sum(Question.objects.filter(exam=exam).values_list("score", flat=True)))


@transaction.atomic
def grade_attempt(attempt: ExamAttempt, *, actor=None) -> GradeOutcome:
    attempt = ExamAttempt.objects.select_for_update().get(id=attempt.id)

    if attempt.status != ExamAttempt.Status.COMPLETED:
        raise StateConflictError(
            "Only completed attempts can be graded.",
            code="ATTEMPT_NOT_COMPLETED",
            context={"attempt_id": attempt.id},
        )
    if attempt.exam_id is None:
        raise StateConflictError(
            "The exam of this attempt was deleted.",
            code="EXAM_DELETED",
            context={"attempt_id": attempt.id},
        )

    exam = attempt.exam
    questions = {q.id: q for q in Question.objects.filter(exam=exam)}
    correct_options, reference = _answer_keys(exam)

    entries = list(
        AttemptAnswer.objects.filter(attempt=attempt, question_id__in=list(questions))
    )
    by_question = {e.question_id: e for e in entries}

    grades = []
    score = 0.0
    for qid in sorted(questions):
        question = questions[qid]
        entry = by_question.get(qid)
        if entry is None:
            grades.append(QuestionGrade(qid, False, 0))
            continue

        if entry.marked_by_teacher:
            ok = True
        else:
            ok = is_answer_correct(
                question,
                entry.answer,
                correct_option_ids=correct_options.get(qid, frozenset()),
                reference_text=reference.get(qid),
            )
        entry.is_correct = ok
        awarded = float(question.score) if ok else 0
        score += awarded
        grades.append(QuestionGrade(qid, ok, awarded))

    if entries:
        AttemptAnswer.objects.bulk_update(entries, ["is_correct"])

    attempt.score = score
    attempt.graded_at = timezone.now()
    attempt.save(update_fields=["score", "graded_at", "updated_at"])

    append_log(
        attempt,
        AttemptLog.Action.TEST_GRADED,
        f"Graded: {score:g}",
        actor=actor,
    )

    outcome = GradeOutcome(
        attempt_id=attempt.id,
        score=score,
        total_possible=float(sum(q.score for q in questions.values())),
        per_question=tuple(grades),
    )
    logger.info(
        "[grade_attempt] attempt_id=%s score=%s/%s",
        attempt.id,
        outcome.score,
        outcome.total_possible,
    )
    return outcome


@transaction.atomic
def recompute_score(attempt: ExamAttempt) -> float:
    """
    Sum of question scores over entries already flagged correct.
    No answer is re-evaluated.
    """
    score = float(
        sum(
            AttemptAnswer.objects.filter(
                attempt=attempt, is_correct=True, question__isnull=False
            ).values_list("question__score", flat=True)
        )
    )
    ExamAttempt.objects.filter(id=attempt.id).update(score=score, updated_at=timezone.now())
    attempt.score = score
    return score


def grade_with_secret_key(*, exam_id: int, secret_key: str, student_id: int) -> GradeOutcome:
    """
    Session-less regrade trigger. The exam secret key is the capability.
    """
    exam = Exam.objects.filter(id=exam_id).first()
    if exam is None:
        raise NotFoundError("Exam not found.", context={"exam_id": exam_id})

    if not secrets.compare_digest((secret_key or "").encode(), exam.secret_key.encode()):
        logger.warning("[grade_with_secret_key] bad key exam_id=%s", exam_id)
        raise ForbiddenError("Invalid secret key.", code="INVALID_SECRET_KEY")

    attempt = (
        ExamAttempt.objects.filter(
            exam=exam,
            student_id=student_id,
            status=ExamAttempt.Status.COMPLETED,
        )
        .order_by("-end_time", "-id")
        .first()
    )
    if attempt is None:
        raise NotFoundError(
            "No completed attempt for this student.",
            code="ATTEMPT_NOT_FOUND",
            context={"student_id": student_id},
        )

    return grade_attempt(attempt)
