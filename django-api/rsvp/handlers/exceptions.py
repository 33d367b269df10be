"""Maps domain errors to HTTP responses.

Unexpected failures are logged with their stack trace and answered with a
generic error body; internal details never reach the client.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from rsvp.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.SESSION_NOT_OPEN: status.HTTP_409_CONFLICT,
    ErrorCode.SESSION_ALREADY_STARTED: status.HTTP_409_CONFLICT,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.PARTICIPANT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PARTICIPANT_NOT_ACTIVE: status.HTTP_409_CONFLICT,
    ErrorCode.PARTICIPANT_NOT_CONFIRMED: status.HTTP_409_CONFLICT,
    ErrorCode.PAYMENT_PROOF_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PROOF_SESSION_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ALREADY_PAID: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_SESSION_HOST: status.HTTP_403_FORBIDDEN,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.IDENTITY_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_UNRESOLVED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def rsvp_exception_handler(exc, context):
    """DRF exception handler for the rsvp API."""
    if isinstance(exc, DomainError):
        set_rollback()
        return Response(
            {"error": exc.message, "code": exc.code.value},
            status=STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST),
        )

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    logger.error(
        "Unhandled error in %s",
        type(view).__name__ if view else "unknown view",
        exc_info=exc,
    )
    set_rollback()
    return Response(
        {"error": "Internal error", "code": "INTERNAL_ERROR"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
