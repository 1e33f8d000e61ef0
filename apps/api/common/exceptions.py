# PATH: apps/api/common/exceptions.py
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.STATE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTEGRITY: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def domain_exception_handler(exc, context):
    """
    DRF exception handler.

    - DomainError -> status by kind, body carries code/kind/context
    - everything else -> DRF default handling
    """
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "[domain_error] view=%s kind=%s code=%s detail=%s",
            type(view).__name__ if view else "-",
            exc.kind,
            exc.code,
            exc.detail,
        )
        return Response(
            exc.as_dict(),
            status=STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST),
        )

    return exception_handler(exc, context)
