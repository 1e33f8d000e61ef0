# PATH: apps/domains/results/services/attempt_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.errors import (
    ForbiddenError,
    NotFoundError,
    StateConflictError,
    ValidationFailed,
)
from apps.domains.exams.models import Exam, ExamSettings, Option, Question
from apps.domains.exams.services.eligibility import (
    access_code_eligibility,
    base_eligibility,
    redeem_access_code,
)
from apps.domains.results.models import AttemptAnswer, AttemptLog, ExamAttempt
from apps.domains.results.services.attempt_log import append_log
from apps.domains.results.services.grading_service import (
    GradeOutcome,
    grade_attempt,
    parse_option_ids,
    recompute_score,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartOutcome:
    attempt: ExamAttempt
    created: bool


@dataclass(frozen=True)
class SubmitOutcome:
    attempt: ExamAttempt
    grade: Optional[GradeOutcome]


# ---------------------------------------------------------------------
# lookups (cross-owner access is reported as NOT_FOUND)
# ---------------------------------------------------------------------

def _not_found(attempt_id) -> NotFoundError:
    return NotFoundError("Attempt not found.", context={"attempt_id": attempt_id})


def get_attempt_for_student(student, attempt_id: int, *, for_update: bool = False) -> ExamAttempt:
    qs = ExamAttempt.objects.all()
    if for_update:
        qs = qs.select_for_update(of=("self",))
    attempt = qs.filter(id=attempt_id, student=student).first()
    if attempt is None:
        raise _not_found(attempt_id)
    return attempt


def get_attempt_for_teacher(teacher, attempt_id: int, *, for_update: bool = False) -> ExamAttempt:
    qs = ExamAttempt.objects.all()
    if for_update:
        qs = qs.select_for_update(of=("self",))
    attempt = qs.filter(id=attempt_id, exam__teacher=teacher).first()
    if attempt is None:
        raise _not_found(attempt_id)
    return attempt


def open_attempt_for(student, exam) -> Optional[ExamAttempt]:
    return (
        ExamAttempt.objects.filter(
            student=student,
            exam=exam,
            status__in=ExamAttempt.OPEN_STATUSES,
        )
        .order_by("-id")
        .first()
    )


def attempt_deadline(attempt: ExamAttempt, exam_settings: Optional[ExamSettings] = None):
    """
    start_time + time_limit + grace. None when the attempt never started.
    """
    if attempt.start_time is None or attempt.exam_id is None:
        return None
    exam_settings = exam_settings or ExamSettings.objects.filter(exam_id=attempt.exam_id).first()
    minutes = exam_settings.time_limit if exam_settings else 60
    grace = int(getattr(settings, "EXAM_TIME_LIMIT_GRACE_SECONDS", 120))
    return attempt.start_time + timedelta(minutes=minutes, seconds=grace)


# ---------------------------------------------------------------------
# start
# ---------------------------------------------------------------------

@transaction.atomic
def start_exam(*, student, exam_id: int, access_code: Optional[str] = None) -> StartOutcome:
    """
    Start (or resume) the student's attempt.

    Order:
      1) enrollment / activation / allow-list
      2) an open attempt exists -> return it (no second redemption)
      3) access code
      4) completed attempt blocks a restart
      5) no in-progress attempt on another exam
      6) redeem the code, create the attempt
    """
    now = timezone.now()

    # serializes concurrent starts on the same exam
    exam = Exam.objects.select_for_update().filter(id=exam_id).first()
    base_eligibility(student, exam, now=now).raise_for_reason()

    existing = open_attempt_for(student, exam)
    if existing is not None:
        if existing.status == ExamAttempt.Status.NOT_STARTED:
            existing.status = ExamAttempt.Status.IN_PROGRESS
            existing.start_time = now
            existing.save(update_fields=["status", "start_time", "updated_at"])
        logger.info(
            "[start_exam] resume attempt_id=%s exam_id=%s student_id=%s",
            existing.id,
            exam.id,
            student.id,
        )
        return StartOutcome(attempt=existing, created=False)

    access_code_eligibility(student, exam, access_code, now=now).raise_for_reason()

    if ExamAttempt.objects.filter(
        student=student, exam=exam, status=ExamAttempt.Status.COMPLETED
    ).exists():
        raise StateConflictError(
            "This exam was already completed.",
            code="ALREADY_COMPLETED",
            context={"exam_id": exam.id},
        )

    elsewhere = (
        ExamAttempt.objects.filter(student=student, status=ExamAttempt.Status.IN_PROGRESS)
        .exclude(exam=exam)
        .values_list("id", flat=True)
        .first()
    )
    if elsewhere is not None:
        raise StateConflictError(
            "Another exam is still in progress.",
            code="ATTEMPT_IN_PROGRESS_ELSEWHERE",
            context={"attempt_id": elsewhere},
        )

    redeem_access_code(exam=exam, student=student)

    try:
        with transaction.atomic():
            attempt = ExamAttempt.objects.create(
                student=student,
                exam=exam,
                exam_title=exam.title,
                status=ExamAttempt.Status.IN_PROGRESS,
                start_time=now,
            )
    except IntegrityError:
        # lost the race on the open-attempt constraint
        attempt = open_attempt_for(student, exam)
        if attempt is None:
            raise
        return StartOutcome(attempt=attempt, created=False)

    append_log(attempt, AttemptLog.Action.TEST_STARTED, "Started test", actor=student)
    logger.info(
        "[start_exam] attempt_id=%s exam_id=%s student_id=%s",
        attempt.id,
        exam.id,
        student.id,
    )
    return StartOutcome(attempt=attempt, created=True)


# ---------------------------------------------------------------------
# answer
# ---------------------------------------------------------------------

def _clean_answer(question: Question, raw) -> str:
    if isinstance(raw, bool):
        raw = "true" if raw else "false"
    elif isinstance(raw, (list, tuple)):
        raw = ",".join(str(x) for x in raw)
    value = "" if raw is None else str(raw).strip()

    if question.type == Question.Type.BOOLEAN:
        value = value.lower()
        if value not in ("true", "false"):
            raise ValidationFailed(
                'Boolean answers must be "true" or "false".',
                code="INVALID_ANSWER",
                context={"question_id": question.id},
            )
        return value

    if question.uses_options:
        ids = parse_option_ids(value)
        if not ids:
            raise ValidationFailed(
                "Answer must reference option ids.",
                code="INVALID_ANSWER",
                context={"question_id": question.id},
            )
        if question.type == Question.Type.OBJ and len(ids) != 1:
            raise ValidationFailed(
                "Exactly one option must be selected.",
                code="INVALID_ANSWER",
                context={"question_id": question.id},
            )
        known = set(
            Option.objects.filter(question=question, id__in=ids).values_list("id", flat=True)
        )
        if known != set(ids):
            raise ValidationFailed(
                "Unknown option for this question.",
                code="INVALID_ANSWER",
                context={"question_id": question.id, "option_ids": sorted(set(ids) - known)},
            )
        return ",".join(str(i) for i in sorted(ids))

    return value


@transaction.atomic
def attempt_question(*, student, attempt_id: int, question_id: int, answer) -> AttemptAnswer:
    """
    Upsert the answer for one question while the attempt is running.
    Re-answering clears any previous correctness flag.
    """
    attempt = get_attempt_for_student(student, attempt_id, for_update=True)

    if attempt.status != ExamAttempt.Status.IN_PROGRESS:
        raise StateConflictError(
            "Attempt is not in progress.",
            code="ATTEMPT_NOT_IN_PROGRESS",
            context={"attempt_id": attempt.id, "status": attempt.status},
        )
    if attempt.exam_id is None:
        raise StateConflictError(
            "The exam of this attempt was deleted.",
            code="EXAM_DELETED",
            context={"attempt_id": attempt.id},
        )

    deadline = attempt_deadline(attempt)
    if deadline is not None and timezone.now() > deadline:
        raise StateConflictError(
            "Time limit exceeded.",
            code="TIME_EXPIRED",
            context={"attempt_id": attempt.id},
        )

    question = Question.objects.filter(id=question_id).first()
    if question is None:
        raise NotFoundError("Question not found.", context={"question_id": question_id})
    if question.exam_id != attempt.exam_id:
        raise ValidationFailed(
            "Question does not belong to this exam.",
            code="QUESTION_NOT_IN_EXAM",
            context={"question_id": question_id},
        )

    value = _clean_answer(question, answer)

    entry, created = AttemptAnswer.objects.update_or_create(
        attempt=attempt,
        question=question,
        defaults={
            "answer": value,
            "is_correct": False,
            "marked_by_teacher": False,
        },
    )

    append_log(
        attempt,
        AttemptLog.Action.QUESTION_ATTEMPTED,
        f"{'Answered' if created else 'Changed answer to'} question {question.id}",
        actor=student,
    )
    return entry


# ---------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------

def _complete(attempt: ExamAttempt, *, action: str, message: str, actor=None) -> Optional[GradeOutcome]:
    attempt.status = ExamAttempt.Status.COMPLETED
    attempt.end_time = timezone.now()
    attempt.save(update_fields=["status", "end_time", "updated_at"])
    append_log(attempt, action, message, actor=actor)

    exam_settings = ExamSettings.objects.filter(exam_id=attempt.exam_id).first()
    if exam_settings and exam_settings.allow_internal_grading:
        outcome = grade_attempt(attempt)
        attempt.refresh_from_db()
        return outcome
    return None


@transaction.atomic
def submit_attempt(*, student, attempt_id: int) -> SubmitOutcome:
    """
    in-progress -> completed. Grades in the same transaction when
    allow_internal_grading is on. result_is_ready stays with the teacher.
    """
    attempt = get_attempt_for_student(student, attempt_id, for_update=True)

    if attempt.status == ExamAttempt.Status.COMPLETED:
        raise StateConflictError(
            "Attempt was already submitted.",
            code="ALREADY_SUBMITTED",
            context={"attempt_id": attempt.id},
        )
    if attempt.status != ExamAttempt.Status.IN_PROGRESS:
        raise StateConflictError(
            "Attempt has not started.",
            code="ATTEMPT_NOT_STARTED",
            context={"attempt_id": attempt.id},
        )

    grade = _complete(
        attempt,
        action=AttemptLog.Action.TEST_SUBMITTED,
        message="Submitted test",
        actor=student,
    )
    logger.info(
        "[submit_attempt] attempt_id=%s graded=%s",
        attempt.id,
        grade is not None,
    )
    return SubmitOutcome(attempt=attempt, grade=grade)


def close_expired_attempts(*, now=None) -> int:
    """
    Auto-submit in-progress attempts past their deadline.
    Each attempt closes in its own transaction.
    """
    now = now or timezone.now()
    closed = 0

    candidates = ExamAttempt.objects.filter(
        status=ExamAttempt.Status.IN_PROGRESS
    ).values_list("id", flat=True)

    for attempt_id in list(candidates):
        with transaction.atomic():
            attempt = (
                ExamAttempt.objects.select_for_update()
                .filter(id=attempt_id, status=ExamAttempt.Status.IN_PROGRESS)
                .first()
            )
            if attempt is None:
                continue
            deadline = attempt_deadline(attempt)
            # attempts of a deleted exam can never be answered again
            if attempt.exam_id is not None and (deadline is None or now <= deadline):
                continue

            _complete(
                attempt,
                action=AttemptLog.Action.AUTO_SUBMITTED,
                message="Submitted automatically after the time limit",
            )
            closed += 1

    logger.info("[close_expired_attempts] closed=%s", closed)
    return closed


# ---------------------------------------------------------------------
# teacher side
# ---------------------------------------------------------------------

def _ensure_can_grade(teacher) -> None:
    if not teacher.can_grade_exam:
        raise ForbiddenError("Teacher may not grade exams.", code="GRADING_NOT_PERMITTED")


def _ensure_result_open(attempt: ExamAttempt) -> None:
    if attempt.status != ExamAttempt.Status.COMPLETED:
        raise StateConflictError(
            "Attempt is not completed.",
            code="ATTEMPT_NOT_COMPLETED",
            context={"attempt_id": attempt.id},
        )
    if attempt.result_is_ready:
        raise StateConflictError(
            "Results were already released.",
            code="RESULT_ALREADY_RELEASED",
            context={"attempt_id": attempt.id},
        )


@transaction.atomic
def mark_results_ready(
    *,
    teacher,
    exam_id: int,
    student_ids: Optional[Iterable[int]] = None,
    notify_via_email: bool = False,
) -> int:
    """
    Release results of completed attempts. In-progress attempts are untouched
    and nothing is regraded. student_ids=None means every student.
    """
    from apps.domains.exams.services.exam_service import get_exam_for_teacher
    from apps.domains.results.tasks.notification_tasks import send_result_ready_emails

    _ensure_can_grade(teacher)
    exam = get_exam_for_teacher(teacher, exam_id)

    qs = ExamAttempt.objects.select_for_update().filter(
        exam=exam,
        status=ExamAttempt.Status.COMPLETED,
    )
    if student_ids is not None:
        qs = qs.filter(student_id__in=[int(x) for x in student_ids])

    attempts = list(qs)
    if not attempts:
        raise NotFoundError(
            "No completed attempts match.",
            code="NO_COMPLETED_ATTEMPTS",
            context={"exam_id": exam.id},
        )

    ids = [a.id for a in attempts]
    ExamAttempt.objects.filter(id__in=ids).update(
        result_is_ready=True,
        updated_at=timezone.now(),
    )
    for attempt in attempts:
        append_log(attempt, AttemptLog.Action.RESULT_READY, "Results are ready", actor=teacher)

    if notify_via_email:
        transaction.on_commit(
            lambda: send_result_ready_emails.delay(ids),
            robust=True,
        )

    logger.info(
        "[mark_results_ready] exam_id=%s attempts=%s notify=%s",
        exam.id,
        len(ids),
        notify_via_email,
    )
    return len(ids)


@transaction.atomic
def mark_question_correct(*, teacher, attempt_id: int, question_id: int) -> AttemptAnswer:
    """
    Manual credit. Kept by later regrades until the answer changes.
    """
    _ensure_can_grade(teacher)
    attempt = get_attempt_for_teacher(teacher, attempt_id, for_update=True)
    _ensure_result_open(attempt)

    question = Question.objects.filter(id=question_id, exam_id=attempt.exam_id).first()
    if question is None:
        raise NotFoundError("Question not found.", context={"question_id": question_id})

    entry, _ = AttemptAnswer.objects.get_or_create(attempt=attempt, question=question)
    entry.is_correct = True
    entry.marked_by_teacher = True
    entry.save(update_fields=["is_correct", "marked_by_teacher", "updated_at"])

    recompute_score(attempt)
    append_log(
        attempt,
        AttemptLog.Action.MARK_QUESTION,
        f"Question {question.id} marked correct",
        actor=teacher,
    )
    logger.info("[mark_question_correct] attempt_id=%s question_id=%s", attempt.id, question.id)
    return entry


@transaction.atomic
def update_attempt(
    *,
    teacher,
    attempt_id: int,
    score: Optional[float] = None,
    teacher_feedback: Optional[str] = None,
) -> ExamAttempt:
    """
    Manual grading: score override and / or feedback.
    """
    _ensure_can_grade(teacher)
    attempt = get_attempt_for_teacher(teacher, attempt_id, for_update=True)
    if attempt.status != ExamAttempt.Status.COMPLETED:
        raise StateConflictError(
            "Attempt is not completed.",
            code="ATTEMPT_NOT_COMPLETED",
            context={"attempt_id": attempt.id},
        )

    fields = ["updated_at"]
    if score is not None:
        if score < 0:
            raise ValidationFailed("score must not be negative.", code="INVALID_SCORE")
        attempt.score = float(score)
        attempt.graded_at = timezone.now()
        fields += ["score", "graded_at"]
    if teacher_feedback is not None:
        attempt.teacher_feedback = teacher_feedback
        fields.append("teacher_feedback")
    attempt.save(update_fields=fields)

    append_log(
        attempt,
        AttemptLog.Action.MANUAL_GRADE,
        f"Updated by teacher (score={attempt.score:g})",
        actor=teacher,
    )
    return attempt


def attempts_for_exam(*, teacher, exam_id: int):
    from apps.domains.exams.services.exam_service import get_exam_for_teacher

    exam = get_exam_for_teacher(teacher, exam_id)
    return (
        ExamAttempt.objects.filter(exam=exam)
        .select_related("student__user")
        .order_by("-created_at")
    )


def attempts_for_student(student):
    return (
        ExamAttempt.objects.filter(student=student)
        .select_related("exam")
        .order_by("-created_at")
    )
