# PATH: apps/domains/results/services/notification_service.py
"""
Result-ready e-mail.

Returns a status dict instead of raising so one bad address never blocks
the rest of a batch.
"""
import logging
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def result_url(exam_id: Optional[int]) -> str:
    base = (getattr(settings, "SITE_URL", "") or "").rstrip("/")
    return f"{base}/student/tests/{exam_id}/analysis"


def send_result_ready_email(attempt) -> dict:
    """
    Returns:
        dict: {"status": "ok"|"error"|"skipped", "reason"?}
    """
    user = attempt.student.user
    to = (user.email or "").strip()
    if not to:
        logger.info("send_result_ready_email skipped: attempt_id=%s has no email", attempt.id)
        return {"status": "skipped", "reason": "no_email"}

    title = attempt.exam_title or (attempt.exam.title if attempt.exam else "your exam")
    subject = f"Results are ready: {title}"
    body = (
        f"Hello {user.get_full_name() or user.username},\n\n"
        f"Your results for \"{title}\" are now available.\n"
        f"{result_url(attempt.exam_id)}\n"
    )

    try:
        send_mail(
            subject,
            body,
            settings.DEFAULT_FROM_EMAIL,
            [to],
            fail_silently=False,
        )
    except Exception as e:
        logger.exception("send_result_ready_email failed: attempt_id=%s", attempt.id)
        return {"status": "error", "reason": str(e)[:500]}

    return {"status": "ok"}
