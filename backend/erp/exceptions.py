# backend/erp/exceptions.py
"""
Error taxonomy shared by the allocation engine.

Every error is a DRF ``APIException`` so the views can let it propagate; the
``default_code`` is the stable *kind* the client switches on.
"""
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler


class NoActiveAllocationError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No allocation going on"
    default_code = "no_active_allocation"


class InvalidStateError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Operation not allowed in the current semester state."
    default_code = "invalid_state"


class PreconditionError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Precondition for this operation is not met."
    default_code = "precondition_failed"


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class ExternalSystemError(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "External system call failed."
    default_code = "external_system_error"


def erp_exception_handler(exc, context):
    """DRF handler that adds ``kind`` next to ``detail``."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, APIException) and isinstance(response.data, dict):
        codes = exc.get_codes()
        kind = codes if isinstance(codes, str) else "invalid"
        response.data["kind"] = kind
    elif isinstance(response.data, list):
        response.data = {"detail": response.data, "kind": "invalid"}
    return response
