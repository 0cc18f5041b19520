from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("hackteam.core")


class ErrorKind:
    """
    Failure categories for team workflow actions.

    Each kind maps onto one HTTP status; the specific cause travels
    separately as the error ``code``.
    """
    NOT_FOUND = "NOT_FOUND"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    WRONG_STATE = "WRONG_STATE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    ALREADY_ON_A_TEAM = "ALREADY_ON_A_TEAM"
    RATE_LIMITED = "RATE_LIMITED"
    VALIDATION = "VALIDATION"

    HTTP_STATUS = {
        NOT_FOUND: status.HTTP_404_NOT_FOUND,
        NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
        WRONG_STATE: status.HTTP_409_CONFLICT,
        CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
        ALREADY_ON_A_TEAM: status.HTTP_409_CONFLICT,
        RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
        VALIDATION: status.HTTP_400_BAD_REQUEST,
    }


class TeamActionError(APIException):
    """
    Raised by the membership and workflow services when an action is refused.

    Raising inside ``transaction.atomic()`` rolls back every write of the
    action, so callers never see a half-applied change.
    """

    def __init__(self, kind, code, message):
        self.kind = kind
        self.code = code
        self.message = message
        self.status_code = ErrorKind.HTTP_STATUS.get(kind, status.HTTP_400_BAD_REQUEST)
        super().__init__(detail=message, code=code)

    def __str__(self):
        return f"{self.code}: {self.message}"

    def as_dict(self):
        return {"detail": self.message, "code": self.code, "kind": self.kind}


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        errors = exc.as_dict() if isinstance(exc, TeamActionError) else response.data
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": errors,
            },
            status=response.status_code,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
