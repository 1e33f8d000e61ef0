# PATH: apps/domains/results/services/analysis_service.py
"""
Per-student exam analysis (read-only).

Students see it only after the teacher released results.
Attempt logs are only part of the teacher view.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from apps.core.errors import NotFoundError, StateConflictError
from apps.core.roles import Actor, Role
from apps.domains.exams.models import Answer, Exam, ExamSettings, Option, Question
from apps.domains.results.models import AttemptAnswer, AttemptLog, ExamAttempt

logger = logging.getLogger(__name__)


GRADE_BANDS: Tuple[Tuple[float, str, str], ...] = (
    (90, "A+", "Excellent"),
    (80, "A", "Very Good"),
    (70, "B", "Good"),
    (60, "C", "Average"),
    (50, "D", "Below Average"),
)
FAILING_BAND = ("F", "Poor")

STRENGTH_THRESHOLD = 70
WEAKNESS_THRESHOLD = 50

TYPE_RECOMMENDATIONS = {
    Question.Type.MCQ: "Practice more multiple choice questions and work on elimination techniques",
    Question.Type.OBJ: "Focus on objective questions and factual knowledge",
    Question.Type.BOOLEAN: "Review true/false concepts and avoid common misconceptions",
    Question.Type.SHORT_ANSWER: "Work on concise and accurate short answer responses",
    Question.Type.LONG_ANSWER: "Practice detailed explanations and structured long-form answers",
}


def grade_band(percentage: float) -> Tuple[str, str]:
    for floor, grade, label in GRADE_BANDS:
        if percentage >= floor:
            return grade, label
    return FAILING_BAND


def _pct(part: float, whole: float) -> float:
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def _recommendations(accuracy: float, completion_rate: float, by_type: Dict[str, Dict[str, Any]], strengths: List[str]) -> List[str]:
    out = []
    if accuracy < 60:
        out.append("Focus on understanding fundamental concepts before attempting advanced questions")
    if completion_rate < 80:
        out.append("Ensure to attempt all questions within the given time limit")
    for qtype, message in TYPE_RECOMMENDATIONS.items():
        perf = by_type.get(qtype)
        if perf is not None and perf["accuracy"] < WEAKNESS_THRESHOLD:
            out.append(message)
    if strengths:
        out.append(f"Continue strengthening your performance in: {', '.join(strengths)} questions")
    return out


def _resolve_attempt(actor: Actor, exam_id: int, student_id: Optional[int]) -> Tuple[Exam, ExamAttempt]:
    if actor.is_student:
        exam = Exam.objects.filter(id=exam_id).first()
        student_id = actor.student.id
    elif actor.is_teacher:
        exam = Exam.objects.filter(id=exam_id, teacher=actor.teacher).first()
    else:
        exam = Exam.objects.filter(id=exam_id).first()

    if exam is None:
        raise NotFoundError("Exam not found.", context={"exam_id": exam_id})
    if student_id is None:
        raise NotFoundError("Attempt not found.", code="ATTEMPT_NOT_FOUND")

    attempt = (
        ExamAttempt.objects.filter(exam=exam, student_id=student_id)
        .select_related("student__user")
        .order_by("-id")
        .first()
    )
    if attempt is None:
        raise NotFoundError(
            "Attempt not found.",
            code="ATTEMPT_NOT_FOUND",
            context={"exam_id": exam.id, "student_id": student_id},
        )

    if actor.is_student and not attempt.result_is_ready:
        raise StateConflictError(
            "Results are not ready yet.",
            code="RESULT_NOT_READY",
            context={"attempt_id": attempt.id},
        )
    return exam, attempt


def _correct_answer(question: Question, options: List[Option], reference: Dict[int, str]):
    if question.type == Question.Type.BOOLEAN:
        return question.boolean_answer
    if question.type == Question.Type.OBJ:
        correct = [o.text for o in options if o.is_correct]
        return correct[0] if correct else None
    if question.type == Question.Type.MCQ:
        return [o.text for o in options if o.is_correct]
    return reference.get(question.id)


def get_student_analysis(*, actor: Actor, exam_id: int, student_id: Optional[int] = None) -> Dict[str, Any]:
    exam, attempt = _resolve_attempt(actor, exam_id, student_id)

    exam_settings = ExamSettings.objects.filter(exam=exam).first()
    reveal = not actor.is_student or bool(exam_settings and exam_settings.show_correct_answers)

    questions = list(Question.objects.filter(exam=exam).prefetch_related("options").order_by("id"))
    reference = dict(
        Answer.objects.filter(question__exam=exam).values_list("question_id", "text")
    )
    entries = {
        e.question_id: e
        for e in AttemptAnswer.objects.filter(attempt=attempt, question__isnull=False)
    }

    total_possible = float(sum(q.score for q in questions))
    rows = []
    by_type: Dict[str, Dict[str, Any]] = {}

    for q in questions:
        entry = entries.get(q.id)
        options = list(q.options.all()) if q.uses_options else []
        is_correct = bool(entry and entry.is_correct)
        earned = float(q.score) if is_correct else 0.0

        row = {
            "question_id": q.id,
            "question": q.text,
            "type": q.type,
            "max_score": q.score,
            "selected_answer": entry.answer if entry else None,
            "is_correct": is_correct,
            "score_earned": earned,
            "is_attempted": entry is not None,
            "explanation": q.explanation,
            "hint": q.hint,
            "options": [
                {"id": o.id, "text": o.text, **({"is_correct": o.is_correct} if reveal else {})}
                for o in options
            ]
            if q.uses_options
            else None,
        }
        if reveal:
            row["correct_answer"] = _correct_answer(q, options, reference)
        rows.append(row)

        perf = by_type.setdefault(
            q.type,
            {"total_questions": 0, "correct_answers": 0, "total_score": 0.0, "earned_score": 0.0, "accuracy": 0.0},
        )
        perf["total_questions"] += 1
        perf["total_score"] += q.score
        perf["earned_score"] += earned
        if is_correct:
            perf["correct_answers"] += 1
        perf["accuracy"] = _pct(perf["correct_answers"], perf["total_questions"])

    total_questions = len(questions)
    attempted = len(entries)
    correct = sum(1 for r in rows if r["is_correct"])
    accuracy = _pct(correct, total_questions)
    completion_rate = _pct(attempted, total_questions)
    percentage = _pct(attempt.score, total_possible)
    grade, performance = grade_band(percentage)

    strengths = [t for t, p in by_type.items() if p["accuracy"] >= STRENGTH_THRESHOLD]
    weaknesses = [t for t, p in by_type.items() if p["accuracy"] < WEAKNESS_THRESHOLD]

    minutes_taken = None
    if attempt.start_time and attempt.end_time:
        minutes_taken = round((attempt.end_time - attempt.start_time).total_seconds() / 60)

    logs = []
    if actor.is_teacher:
        logs = [
            {
                "action": log.action,
                "message": log.message,
                "severity": log.severity,
                "actor": log.actor,
                "created_at": log.created_at,
            }
            for log in AttemptLog.objects.filter(attempt=attempt).order_by("created_at", "id")
        ]

    logger.info(
        "[get_student_analysis] attempt_id=%s role=%s",
        attempt.id,
        actor.role,
    )

    return {
        "attempt": {
            "id": attempt.id,
            "status": attempt.status,
            "start_time": attempt.start_time,
            "end_time": attempt.end_time,
            "total_time_taken": minutes_taken,
            "result_is_ready": attempt.result_is_ready,
        },
        "exam": {"id": exam.id, "title": exam.title, "subject_id": exam.subject_id},
        "student": {"id": attempt.student_id, "username": attempt.student.user.username},
        "overall_performance": {
            "score": attempt.score,
            "total_possible_score": total_possible,
            "score_percentage": percentage,
            "grade": grade,
            "performance": performance,
            "accuracy": accuracy,
            "completion_rate": completion_rate,
            "total_questions_attempted": attempted,
            "correct_answers": correct,
            "incorrect_answers": attempted - correct,
            "unattempted_questions": total_questions - attempted,
        },
        "question_analysis": rows,
        "type_performance": by_type,
        "insights": {
            "strengths": strengths,
            "weaknesses": weaknesses,
            "recommendations": _recommendations(accuracy, completion_rate, by_type, strengths),
        },
        "teacher_feedback": attempt.teacher_feedback or None,
        "student_logs": logs,
    }
