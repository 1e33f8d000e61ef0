from .exam_attempt import ExamAttempt
from .attempt_answer import AttemptAnswer
from .attempt_log import AttemptLog

__all__ = [
    "ExamAttempt",
    "AttemptAnswer",
    "AttemptLog",
]
