# PATH: apps/domains/results/services/dashboard_service.py
from __future__ import annotations

from typing import Any, Dict

from django.db.models import Count, Q

from apps.domains.exams.models import Exam
from apps.domains.results.models import ExamAttempt


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def ongoing_exams_for_teacher(teacher, *, limit: int = 3) -> Dict[str, Any]:
    """
    Latest active exams of the teacher with submission counts.
    """
    exams = (
        Exam.objects.filter(teacher=teacher, is_active=True)
        .select_related("subject")
        .annotate(
            total_allowed=Count("allowed_students", distinct=True),
            total_submitted=Count(
                "attempts",
                filter=Q(attempts__status=ExamAttempt.Status.COMPLETED),
                distinct=True,
            ),
        )
        .order_by("-created_at")[:limit]
    )

    rows = [
        {
            "id": e.id,
            "title": e.title,
            "subject": e.subject.name,
            "total_allowed_students": e.total_allowed,
            "total_submitted": e.total_submitted,
            "submission_rate": _rate(e.total_submitted, e.total_allowed),
        }
        for e in exams
    ]
    submitted = sum(r["total_submitted"] for r in rows)
    allowed = sum(r["total_allowed_students"] for r in rows)

    return {
        "total_ongoing_exams": len(rows),
        "total_submissions": submitted,
        "total_allowed_students": allowed,
        "overall_submission_rate": _rate(submitted, allowed),
        "exams": rows,
    }


def recent_submissions_for_teacher(teacher, *, limit: int = 8):
    """
    Completed attempts on the teacher's most recent exam.
    """
    latest = Exam.objects.filter(teacher=teacher).order_by("-created_at").first()
    if latest is None:
        return ExamAttempt.objects.none()
    return (
        ExamAttempt.objects.filter(exam=latest, status=ExamAttempt.Status.COMPLETED)
        .select_related("student__user", "exam")
        .order_by("-end_time", "-id")[:limit]
    )
