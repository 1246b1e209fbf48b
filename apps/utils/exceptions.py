import logging

from django.core.exceptions import ObjectDoesNotExist
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BusinessLogicException(Exception):
    """
    A shop rule was broken, e.g. 'Order does not exist.' or an unknown
    payment method. Answered as a 400 with the message and a code.
    """

    def __init__(self, message, code="business_error"):
        self.message = message
        self.code = code
        super().__init__(message)


def custom_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if isinstance(exc, BusinessLogicException):
        return Response({"error": exc.message, "code": exc.code}, status=status.HTTP_400_BAD_REQUEST)

    # A model .get() that found nothing
    if isinstance(exc, ObjectDoesNotExist):
        return Response({"error": "Not found.", "code": "not_found"}, status=status.HTTP_404_NOT_FOUND)

    if response is None:
        view = context.get("view")
        logger.error(
            f"Unhandled Exception in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
            exc_info=True,
        )
        return Response(
            {"error": "Internal Server Error", "code": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return response
