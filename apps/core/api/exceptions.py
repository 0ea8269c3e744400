from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import (
    BusinessError,
    ConflictError,
    InsufficientStockError,
    NotFoundError,
)


def business_exception_handler(exc, context):
    """
    DRF exception handler that turns domain errors into JSON responses.
    Anything else falls through to the default handler.
    """
    if not isinstance(exc, BusinessError):
        return exception_handler(exc, context)

    body = {"error": exc.message, "code": exc.code}

    if isinstance(exc, NotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        http_status = status.HTTP_409_CONFLICT
    elif isinstance(exc, InsufficientStockError):
        http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
        body["required"] = exc.required
        body["available"] = exc.available
    else:
        http_status = status.HTTP_400_BAD_REQUEST

    return Response(body, status=http_status)
