from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _coerce_param(value: Any) -> Any:
    # Binary values travel as arrays of byte integers.
    if isinstance(value, list):
        if not all(isinstance(item, int) and not isinstance(item, bool) and 0 <= item <= 255 for item in value):
            raise ValueError("array parameters must contain byte values (0-255)")
        return bytes(value)
    if isinstance(value, dict):
        raise ValueError("object parameters are not supported")
    return value


def _coerce_params(v: Any) -> List[Any]:
    if v is None:
        return []
    if not isinstance(v, list):
        raise ValueError("params must be an array")
    return [_coerce_param(item) for item in v]


class QueryRequest(BaseModel):
    """One statement plus positional bind values."""

    sql: str
    params: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("params", mode="before")
    @classmethod
    def coerce_params(cls, v: Any) -> List[Any]:
        return _coerce_params(v)


class RawQueryBody(BaseModel):
    """Body of ``POST /query/raw``: a single statement or a transaction.

    ``transaction`` wins over a same-body ``sql``.
    """

    sql: Optional[str] = None
    params: List[Any] = Field(default_factory=list)
    transaction: Optional[List[QueryRequest]] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("params", mode="before")
    @classmethod
    def coerce_params(cls, v: Any) -> List[Any]:
        return _coerce_params(v)

    def statements(self) -> List[QueryRequest]:
        if self.transaction is not None:
            return list(self.transaction)
        if self.sql:
            return [QueryRequest(sql=self.sql, params=self.params)]
        raise ValueError("Request body must contain 'sql' or 'transaction'")


class ResultMeta(BaseModel):
    rows_read: int = 0
    rows_written: int = 0


class RawResult(BaseModel):
    """Raw shape of one executed statement."""

    columns: List[str]
    rows: List[List[Any]]
    meta: ResultMeta


class ResponseEnvelope(BaseModel):
    """``{result, error}``; exactly one of them is non-null."""

    result: Optional[Any] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def exactly_one_field(self) -> "ResponseEnvelope":
        if (self.result is None) == (self.error is None):
            raise ValueError("exactly one of 'result' and 'error' must be set")
        return self

    @classmethod
    def success(cls, result: Any) -> "ResponseEnvelope":
        return cls(result=result)

    @classmethod
    def failure(cls, error: str) -> "ResponseEnvelope":
        return cls(error=error)
