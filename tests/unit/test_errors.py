import pytest

from browsable_sql.common.errors import (
    BrowsableError,
    ErrorCode,
    InvalidRequestError,
    NoRowsError,
    QueryExecutionError,
    QueryValidationError,
    RemoteQueryError,
)


@pytest.mark.parametrize(
    "error,code",
    [
        (InvalidRequestError("Invalid JSON body"), ErrorCode.INVALID_REQUEST),
        (QueryValidationError("Write operation not allowed: DROP", statement="DROP TABLE t"), ErrorCode.INVALID_QUERY),
        (QueryExecutionError(RuntimeError("no such table: t")), ErrorCode.EXECUTION_ERROR),
        (RemoteQueryError("SQL execution failed: 500"), ErrorCode.REMOTE_ERROR),
        (NoRowsError(), ErrorCode.NO_ROWS),
    ],
)
def test_every_code_belongs_to_an_error(error, code):
    assert isinstance(error, BrowsableError)
    assert error.error_code is code


def test_codes_are_the_raised_ones():
    assert {code.value for code in ErrorCode} == {
        "INVALID_QUERY",
        "INVALID_REQUEST",
        "EXECUTION_ERROR",
        "REMOTE_ERROR",
        "NO_ROWS",
    }


def test_messages():
    assert str(QueryValidationError("too long")) == "Invalid query: too long"
    assert str(QueryExecutionError(RuntimeError())) == "RuntimeError"
    assert NoRowsError().message == "No rows returned"
