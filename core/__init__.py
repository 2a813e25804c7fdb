from .errors import (
    BackendError,
    GatewayError,
    NotFoundError,
    QuerySyntaxError,
    RequestParameterError,
)
from .tickets import Ticket, format_ticket, parse_ticket

__all__ = [
    "GatewayError",
    "RequestParameterError",
    "QuerySyntaxError",
    "BackendError",
    "NotFoundError",
    "Ticket",
    "parse_ticket",
    "format_ticket",
]
