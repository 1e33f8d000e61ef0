# PATH: apps/domains/results/services/attempt_log.py
from __future__ import annotations

from apps.domains.results.models import AttemptLog


def actor_label(obj) -> str:
    if obj is None:
        return "system"
    return f"{obj._meta.model_name}:{obj.id}"


def append_log(attempt, action: str, message: str = "", *, actor=None, severity: str = AttemptLog.Severity.INFO) -> AttemptLog:
    return AttemptLog.objects.create(
        attempt=attempt,
        action=action,
        message=message,
        actor=actor_label(actor),
        severity=severity,
    )
