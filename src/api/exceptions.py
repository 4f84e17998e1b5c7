"""Map domain exceptions onto DRF error responses."""
import logging

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = logging.getLogger("backoffice")


def backoffice_exception_handler(exc, context):
    """DRF exception handler that also understands Django's own errors.

    ``django.core.exceptions.ValidationError`` raised by services becomes a
    400 with the same field -> messages mapping, and any
    ``ObjectDoesNotExist`` becomes a 404 carrying its message.
    """
    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else exc.messages
        exc = exceptions.ValidationError(detail)
    elif isinstance(exc, ObjectDoesNotExist):
        exc = exceptions.NotFound(str(exc) or "Not found.")

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled API error in %s: %s",
            view.__class__.__name__ if view else "unknown view",
            exc,
            exc_info=exc,
        )
    return response
