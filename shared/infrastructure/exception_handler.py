"""
DRF exception handler for domain errors.

Maps ``DomainError`` subclasses to HTTP responses so views stay thin:
services raise, this module renders. Anything else falls through to the
default DRF handler (and unknown exceptions to a 500).
"""
from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.warning(
            "Domain error %s in %s: %s",
            exc.code,
            view.__class__.__name__ if view else "-",
            exc.message,
        )
        return Response(exc.as_dict(), status=exc.status_code)
    return drf_exception_handler(exc, context)
