from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Standardized error codes for the gateway and its clients."""
    INVALID_QUERY = "INVALID_QUERY"
    INVALID_REQUEST = "INVALID_REQUEST"
    EXECUTION_ERROR = "EXECUTION_ERROR"
    REMOTE_ERROR = "REMOTE_ERROR"
    NO_ROWS = "NO_ROWS"


class BrowsableError(Exception):
    """Base class for errors raised by the gateway and the remote cursor.

    Attributes:
        message (str): A human-readable error message, surfaced verbatim in envelopes.
        error_code (ErrorCode): The standardized error code.
    """

    error_code: ErrorCode = ErrorCode.EXECUTION_ERROR

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(BrowsableError):
    """The request body could not be decoded into a known shape."""
    error_code = ErrorCode.INVALID_REQUEST


class QueryValidationError(BrowsableError):
    """A statement was rejected by the configured validator."""
    error_code = ErrorCode.INVALID_QUERY

    def __init__(self, reason: Optional[str], statement: str = ""):
        message = f"Invalid query: {reason}" if reason else "Invalid query"
        super().__init__(message)
        self.reason = reason
        self.statement = statement


class QueryExecutionError(BrowsableError):
    """The execution adapter raised while running a statement.

    The message is the original exception text; the exception itself is kept
    on ``original`` and chained as ``__cause__``.
    """
    error_code = ErrorCode.EXECUTION_ERROR

    def __init__(self, original: BaseException, statement: str = ""):
        super().__init__(str(original) or original.__class__.__name__)
        self.original = original
        self.statement = statement


class RemoteQueryError(BrowsableError):
    """A remote gateway call failed or returned an error envelope."""
    error_code = ErrorCode.REMOTE_ERROR


class NoRowsError(BrowsableError):
    """``one()`` was called on a result without rows."""
    error_code = ErrorCode.NO_ROWS

    def __init__(self, message: str = "No rows returned"):
        super().__init__(message)
