"""Mapping of domain errors to HTTP responses."""

from rest_framework import status
from rest_framework.response import Response

from ticketing.domain.errors import DomainError, ErrorCode

STATUS_BY_CODE = {
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_INVENTORY: status.HTTP_409_CONFLICT,
    ErrorCode.ORDER_NOT_PAID: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.CORRELATION_MISSING: status.HTTP_400_BAD_REQUEST,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.GATEWAY_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(error: DomainError) -> Response:
    """Build a response exposing only the error code and its user-safe message."""
    return Response(
        {"error": {"code": error.code.value, "message": error.message}},
        status=STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def validation_error_response(field_errors: dict) -> Response:
    """Build the error body for a request rejected by serializer validation."""
    return Response(
        {
            "error": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": "Invalid request",
                "fields": field_errors,
            }
        },
        status=STATUS_BY_CODE[ErrorCode.VALIDATION_ERROR],
    )
