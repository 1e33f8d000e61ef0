# PATH: apps/domains/exams/projections.py
"""
Role-dependent views of questions and options.

Students never see grading material: boolean_answer, score, explanation,
hint on questions and is_correct on options.
"""
from __future__ import annotations

import random
from typing import Any, Dict, Iterable, List, Optional

from apps.core.roles import Role
from apps.domains.exams.models import Option, Question

QUESTION_FIELDS = (
    "id",
    "type",
    "text",
    "score",
    "hint",
    "explanation",
    "media_url",
    "media_type",
    "boolean_answer",
)
OPTION_FIELDS = ("id", "text", "is_correct", "media_url", "media_type")

HIDDEN_QUESTION_FIELDS = {
    Role.STUDENT: frozenset({"boolean_answer", "score", "explanation", "hint"}),
}
HIDDEN_OPTION_FIELDS = {
    Role.STUDENT: frozenset({"is_correct"}),
}


def _visible(fields, hidden) -> List[str]:
    return [f for f in fields if f not in hidden]


def project_option(option: Option, role: str) -> Dict[str, Any]:
    hidden = HIDDEN_OPTION_FIELDS.get(role, frozenset())
    return {f: getattr(option, f) for f in _visible(OPTION_FIELDS, hidden)}


def project_question(
    question: Question,
    role: str,
    *,
    shuffle_options: bool = False,
    rng: Optional[random.Random] = None,
) -> Dict[str, Any]:
    hidden = HIDDEN_QUESTION_FIELDS.get(role, frozenset())
    data = {f: getattr(question, f) for f in _visible(QUESTION_FIELDS, hidden)}
    data["exam_id"] = question.exam_id

    if question.uses_options:
        options = [project_option(o, role) for o in question.options.all()]
        if shuffle_options:
            (rng or random).shuffle(options)
        data["options"] = options
    else:
        data["options"] = []

    return data


def project_questions(
    questions: Iterable[Question],
    role: str,
    *,
    shuffle_questions: bool = False,
    shuffle_options: bool = False,
    seed: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    seed keeps the order stable for one attempt across reloads.
    """
    rng = random.Random(seed) if seed is not None else None
    items = [
        project_question(q, role, shuffle_options=shuffle_options, rng=rng)
        for q in questions
    ]
    if shuffle_questions:
        (rng or random).shuffle(items)
    return items
