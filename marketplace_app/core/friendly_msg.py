import httpx
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError

from .breaker import CircuitOpenError

DEFAULT_MESSAGE = "Something went wrong on our end. Please try again."

FRIENDLY_MESSAGES = (
    (IntegrityError, "This change conflicts with an existing booking or record."),
    (OperationalError, "The listings database is busy. Please try again shortly."),
    (DBAPIError, "Temporary issue while accessing data. Please try again shortly."),
    (CircuitOpenError, "A partner service is paused after repeated failures. Please try again later."),
    (httpx.TimeoutException, "The payment provider took too long to respond. Please try again."),
    (httpx.HTTPError, "Unable to reach the payment provider. Please try again later."),
    (ConnectionError, "Unable to connect to a required service. Please try again later."),
    (TimeoutError, "The request took too long. Please try again later."),
    (ValueError, "Invalid data received. Please check your input and try again."),
)


def get_friendly_message(error: Exception) -> str:
    for error_type, message in FRIENDLY_MESSAGES:
        if isinstance(error, error_type):
            return message
    return DEFAULT_MESSAGE
