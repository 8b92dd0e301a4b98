"""Contains all of the exceptions that can be thrown within this library as well
as handling error cases for HTTP requests made to the CMR applications."""

from typing import Any, List, Optional

import requests

from cmrtransmit.core import utils


class TransmitError(Exception):
    """Generic exception thrown by the library."""


class TransmitHTTPError(TransmitError, requests.exceptions.HTTPError):
    """Wraps recognized HTTP errors.  See
    `HTTPError <http://docs.python-requests.org/en/latest/api/?highlight=exceptions#requests.exceptions.HTTPError>`_

    Attributes:
        status: The HTTP status of the response, if there was one.
        errors: The error messages returned by the application.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[Any]] = None,
        status: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message, response=response)
        self.status = status
        self.errors = errors if errors is not None else [message]


class TransmitNotFoundError(TransmitHTTPError):
    """The requested resource does not exist."""


class TransmitInvalidDataError(TransmitHTTPError):
    """The application rejected the data that was sent."""


class TransmitConflictError(TransmitHTTPError):
    """A conflict such as a post commit constraint violation."""


class TransmitUnauthorizedError(TransmitHTTPError):
    """The token used was missing, invalid or lacked permission."""


class TransmitInternalError(TransmitHTTPError):
    """An unexpected response was received from an application."""


class AclConversionError(TransmitError):
    """Base class for failures converting an ACL between the ECHO and CMR shapes.

    Attributes:
        path: Location of the offending object within the ACL,
            e.g. `acl.access_control_entries[2].sid`.
        value: The offending object.
    """

    def __init__(self, message: str, path: str = None, value: Any = None):
        self.path = path
        self.value = value
        if path:
            message = f"{message} at [{path}]"
        super().__init__(message)


class MalformedSidError(AclConversionError):
    """A sid matched none or more than one of the group and user type shapes."""


class UnsupportedIdentityKindError(AclConversionError):
    """The ACL identity kind is not one this library knows how to handle."""


class SchemaViolationError(AclConversionError):
    """A field interpreted by the ACL codec is missing or has the wrong type."""


STATUS_TO_ERROR = {
    400: TransmitInvalidDataError,
    401: TransmitUnauthorizedError,
    403: TransmitUnauthorizedError,
    404: TransmitNotFoundError,
    409: TransmitConflictError,
    422: TransmitInvalidDataError,
}


def errors_from_body(body: Any) -> List[Any]:
    """Returns the flattened `errors` list of a decoded CMR error response."""
    if isinstance(body, dict):
        return list(utils.flatten(body.get("errors", [])))
    return []


def unexpected_status_error(status: int, body: Any) -> None:
    """Raises an internal error for a status code the caller did not expect."""
    raise TransmitInternalError(
        f"Unexpected status {status} from response. body: {body!r}", status=status
    )


def raise_for_status(response, action: str = "Request", verbose: bool = False) -> None:
    """
    Replacement for requests.response.raise_for_status().
    Raises the error matching the status of a non successful response, carrying the
    errors returned by the application.

    Arguments:
        response: A `cmrtransmit.core.connection.TransmitResponse`.
        action: Describes the request in the error message, e.g. `Save concept`.
        verbose: If True, the response headers and body are appended to the message.
    """
    if 200 <= response.status < 300:
        return

    errors = errors_from_body(response.body)
    message = f"{action} failed. Response status code: {response.status}"
    if errors:
        message += " " + "; ".join(str(e) for e in errors)
    elif response.text:
        message += f" {response.text}"

    if verbose:
        message += f"\n>>> Headers: {dict(response.headers)}\n>>> Body: {response.text}"

    error_class = STATUS_TO_ERROR.get(response.status, TransmitInternalError)
    raise error_class(
        message, errors=errors or None, status=response.status, response=response
    )
