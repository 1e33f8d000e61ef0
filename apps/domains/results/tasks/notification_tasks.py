# apps/domains/results/tasks/notification_tasks.py
import logging
from typing import List

from celery import shared_task

from apps.domains.results.models import ExamAttempt
from apps.domains.results.services.notification_service import send_result_ready_email

logger = logging.getLogger(__name__)


@shared_task(bind=True, autoretry_for=(ConnectionError,), retry_kwargs={"max_retries": 3})
def send_result_ready_emails(self, attempt_ids: List[int]) -> dict:
    attempts = (
        ExamAttempt.objects.filter(id__in=attempt_ids, result_is_ready=True)
        .select_related("student__user", "exam")
    )

    counts = {"ok": 0, "error": 0, "skipped": 0}
    for attempt in attempts:
        result = send_result_ready_email(attempt)
        counts[result["status"]] += 1

    logger.info("[send_result_ready_emails] attempts=%s result=%s", len(attempt_ids), counts)
    return counts
