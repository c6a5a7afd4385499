"""Error values returned by API handler steps."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Kinds of failures a handler step can report, with their HTTP status codes."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    STORAGE = "storage"
    DELIVERY = "delivery"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self]


ERROR_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.STORAGE: 500,
    ErrorKind.DELIVERY: 500,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.INTERNAL: 500,
}


@dataclass
class ApiError:
    """A failed handler step.

    Steps return an `ApiError` instead of raising, and handlers pass it up by
    returning early. No side effects are attempted after an error is produced.

    Attributes:
        kind: What went wrong. Determines the response status code.
        message: Client facing error message.
        cause: The underlying exception, if any. Logged, never returned.
        details: Structured fields added to the error log line.
    """

    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = field(default=None, repr=False)
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return self.kind.status_code
