"""Client-side cursor backed by a gateway's raw-query endpoint.

The request is sent as soon as the cursor is created. Every read awaits that
single round trip; once it has resolved, the rows are replayed from memory.
"""
import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from browsable_sql.common.errors import NoRowsError, RemoteQueryError

logger = logging.getLogger(__name__)

QUERY_RAW_PATH = "/query/raw"

SqlValue = Union[bytes, str, int, float, None]
SqlRow = Dict[str, SqlValue]


def _encode_binding(value: SqlValue) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return list(bytes(value))
    return value


def _decode_cell(value: Any) -> SqlValue:
    # Binary cells arrive as arrays of byte integers.
    if isinstance(value, list):
        return bytes(value)
    return value


class RemoteSqlCursor:
    """Cursor whose rows come from one POST to ``/query/raw``.

    Must be created while an event loop is running. Construction never raises
    for query failures; they surface on the first awaited read. There is no
    cancellation or re-fetch; create a new cursor to retry.

    Args:
        stub (httpx.AsyncClient): Client whose ``base_url`` points at the gateway prefix.
        query (str): The statement text.
        bindings (Sequence[SqlValue]): Positional bind values.
        authorization (Optional[str]): Value for the ``Authorization`` header.
    """

    def __init__(
        self,
        stub: httpx.AsyncClient,
        query: str,
        bindings: Sequence[SqlValue] = (),
        authorization: Optional[str] = None,
    ):
        self.stub = stub
        self.query = query
        self.bindings = list(bindings)
        self._results: List[SqlRow] = []
        self._raw_rows: List[List[SqlValue]] = []
        self._current_index = 0
        self._column_names: List[str] = []
        self._rows_read = 0
        self._rows_written = 0
        self._is_resolved = False
        self._error: Optional[RemoteQueryError] = None
        self._fetch_task = asyncio.get_running_loop().create_task(self._execute_query(authorization))

    async def _execute_query(self, authorization: Optional[str]) -> None:
        headers = {"Content-Type": "application/json"}
        if authorization:
            headers["Authorization"] = authorization

        try:
            response = await self.stub.post(
                QUERY_RAW_PATH,
                headers=headers,
                json={"sql": self.query, "params": [_encode_binding(b) for b in self.bindings]},
            )

            if not response.is_success:
                raise RemoteQueryError(f"SQL execution failed: {response.text}")

            data = response.json()
            if not isinstance(data, dict):
                raise RemoteQueryError("SQL execution failed: unexpected response body")
            if data.get("error"):
                raise RemoteQueryError(str(data["error"]))

            results = data.get("result") or []
            if not isinstance(results, list):
                raise RemoteQueryError("SQL execution failed: unexpected response body")
            if results:
                self._load(results[0])
        except RemoteQueryError as e:
            logger.debug("Remote query failed: %s", e)
            self._error = e
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Remote query failed: %s", e)
            self._error = RemoteQueryError(f"SQL execution failed: {e}")
        except (KeyError, TypeError, AttributeError) as e:
            logger.debug("Remote query returned an unexpected body: %r", e)
            self._error = RemoteQueryError("SQL execution failed: unexpected response body")
        finally:
            self._is_resolved = True

    def _load(self, result: Mapping[str, Any]) -> None:
        if result.get("columns"):
            self._column_names = list(result["columns"])

        if result.get("rows"):
            self._raw_rows = [[_decode_cell(value) for value in row] for row in result["rows"]]
            self._results = [dict(zip(self._column_names, row)) for row in self._raw_rows]

        meta = result.get("meta")
        if meta:
            self._rows_read = meta.get("rows_read") or 0
            self._rows_written = meta.get("rows_written") or 0

    async def _ensure_resolved(self) -> None:
        if not self._is_resolved:
            await self._fetch_task

        if self._error is not None:
            raise self._error

    async def next(self) -> Optional[SqlRow]:
        """Returns the next row, or None once all rows were consumed."""
        await self._ensure_resolved()

        if self._current_index < len(self._results):
            row = self._results[self._current_index]
            self._current_index += 1
            return row

        return None

    async def to_array(self) -> List[SqlRow]:
        await self._ensure_resolved()
        return list(self._results)

    async def one(self) -> SqlRow:
        await self._ensure_resolved()

        if not self._results:
            raise NoRowsError()

        return self._results[0]

    async def raw_iterate(self) -> AsyncIterator[List[SqlValue]]:
        await self._ensure_resolved()

        for row in self._raw_rows:
            yield list(row)

    async def raw(self) -> List[List[SqlValue]]:
        await self._ensure_resolved()
        return [list(row) for row in self._raw_rows]

    @property
    def is_resolved(self) -> bool:
        return self._is_resolved

    @property
    def column_names(self) -> List[str]:
        return list(self._column_names)

    @property
    def rows_read(self) -> int:
        return self._rows_read

    @property
    def rows_written(self) -> int:
        return self._rows_written

    def __aiter__(self) -> "RemoteSqlCursor":
        return self

    async def __anext__(self) -> SqlRow:
        row = await self.next()
        if row is None:
            raise StopAsyncIteration
        return row


def remote_exec(stub: httpx.AsyncClient, sql: str, *bindings: SqlValue) -> RemoteSqlCursor:
    return RemoteSqlCursor(stub, sql, bindings)


def get_exec(stub: httpx.AsyncClient, authorization: Optional[str] = None):
    """Returns an ``exec(sql, *bindings)`` bound to ``stub``.

    The returned function satisfies the gateway's execution adapter contract,
    so one gateway can front another.
    """

    def exec_fn(query: str, *bindings: SqlValue) -> RemoteSqlCursor:
        return RemoteSqlCursor(stub, query, bindings, authorization)

    return exec_fn


def make_stub(
    base_url: str,
    base_headers: Optional[Mapping[str, str]] = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Builds a client for a gateway mounted at ``base_url``.

    Request paths are appended to the path of ``base_url``.
    """
    headers = {"Content-Type": "application/json"}
    if base_headers:
        headers.update(base_headers)
    return httpx.AsyncClient(base_url=base_url, headers=headers, **client_kwargs)
