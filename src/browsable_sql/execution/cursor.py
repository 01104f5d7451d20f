"""Execution adapter contract.

The gateway never talks to an engine directly. It calls an ``ExecFunction``
``(sql, *params) -> Cursor`` supplied by the host, which may be a local engine
binding or a remote cursor factory. Cursor realizations may be synchronous or
awaitable.
"""
import inspect
import math
from decimal import Decimal
from typing import Any, Awaitable, Callable, Iterable, List, Protocol, Sequence, TypeVar, Union, runtime_checkable

from fastapi.encoders import jsonable_encoder

T = TypeVar("T")

MaybeAwaitable = Union[T, Awaitable[T]]


@runtime_checkable
class Cursor(Protocol):
    """Result handle of one executed statement."""

    @property
    def column_names(self) -> Sequence[str]:
        ...

    @property
    def rows_read(self) -> int:
        ...

    @property
    def rows_written(self) -> int:
        ...

    def raw(self) -> MaybeAwaitable[Iterable[Sequence[Any]]]:
        """Positional value rows."""
        ...

    def to_array(self) -> MaybeAwaitable[List[dict]]:
        """Rows keyed by column name."""
        ...


ExecFunction = Callable[..., MaybeAwaitable[Cursor]]


async def maybe_await(value: MaybeAwaitable[T]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


async def run_exec(exec_fn: ExecFunction, sql: str, params: Sequence[Any] = ()) -> Cursor:
    """Invokes the execution adapter, spreading params only when present."""
    if params:
        return await maybe_await(exec_fn(sql, *params))
    return await maybe_await(exec_fn(sql))


async def realize_raw(cursor: Cursor) -> List[List[Any]]:
    """Materializes positional rows.

    Must run before reading ``column_names`` and counters, which remote cursors
    only know once resolved.
    """
    rows = await maybe_await(cursor.raw())
    return [list(row) for row in rows]


async def realize_objects(cursor: Cursor) -> List[dict]:
    rows = await maybe_await(cursor.to_array())
    return [dict(row) for row in rows]


def to_wire_value(value: Any) -> Any:
    """Makes a cell JSON-safe.

    Binary values become arrays of byte integers. Non-finite numbers become
    null. Driver types such as ``Decimal`` or ``datetime`` go through
    ``jsonable_encoder``.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return list(bytes(value))
    if isinstance(value, Decimal) and not value.is_finite():
        return None
    value = jsonable_encoder(value)
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def to_wire_row(row: Sequence[Any]) -> List[Any]:
    return [to_wire_value(value) for value in row]
