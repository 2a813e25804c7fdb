"""Errors raised while serving gateway requests.

Every error is reported to the client the same way (status 418 with the
message as plain text), the classes only keep the causes apart for logging
and tests.
"""


class GatewayError(Exception):
    """Base class for all request-level errors."""


class RequestParameterError(GatewayError):
    """Raised when a request parameter is missing, repeated or malformed."""


class QuerySyntaxError(GatewayError):
    """Raised when the backend rejects a translated query."""


class BackendError(GatewayError):
    """Raised when the search backend fails or returns garbage."""


class NotFoundError(GatewayError):
    """Raised when a requested file is not part of the backend response."""
