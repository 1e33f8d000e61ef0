# PATH: apps/core/accounts.py
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model

from apps.core.errors import ValidationFailed

logger = logging.getLogger(__name__)


def create_account_user(
    *,
    username: str,
    password: str,
    email: str = "",
    first_name: str = "",
    last_name: str = "",
):
    """
    auth.User row shared by teacher / student profiles.
    Callers wrap this in their own transaction.
    """
    User = get_user_model()
    username = (username or "").strip()
    if not username:
        raise ValidationFailed("username is required.", code="USERNAME_REQUIRED")
    if User.objects.filter(username=username).exists():
        raise ValidationFailed(
            "username is already taken.",
            code="USERNAME_TAKEN",
            context={"username": username},
        )

    user = User.objects.create_user(
        username=username,
        password=password,
        email=(email or "").strip(),
        first_name=first_name or "",
        last_name=last_name or "",
    )
    logger.info("[create_account_user] user_id=%s username=%s", user.id, username)
    return user
