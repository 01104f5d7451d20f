import asyncio
import json

import httpx
import pytest

from browsable_sql.common.errors import NoRowsError, RemoteQueryError
from browsable_sql.remote.cursor import RemoteSqlCursor, get_exec, make_stub, remote_exec


def _envelope(columns, rows, rows_read=0, rows_written=0):
    return {
        "result": [
            {
                "columns": columns,
                "rows": rows,
                "meta": {"rows_read": rows_read, "rows_written": rows_written},
            }
        ],
        "error": None,
    }


class RecordingGateway:
    """Stands in for a gateway; records every request it receives."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self.payload = payload
        self.text = text
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    def stub(self, base_url="http://internal"):
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=base_url)


@pytest.mark.asyncio
async def test_to_array_materializes_row_objects():
    gateway = RecordingGateway(payload=_envelope(["x"], [[1]], rows_read=7))

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT 1 as x")

    assert await cursor.to_array() == [{"x": 1}]
    assert cursor.column_names == ["x"]
    assert cursor.rows_read == 7
    assert cursor.rows_written == 0


@pytest.mark.asyncio
async def test_request_starts_at_construction():
    gateway = RecordingGateway(payload=_envelope(["x"], [[1]]))

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT 1 as x")
    await asyncio.sleep(0.05)

    assert len(gateway.requests) == 1
    assert cursor.is_resolved


@pytest.mark.asyncio
async def test_reads_share_one_round_trip():
    gateway = RecordingGateway(payload=_envelope(["x"], [[1], [2]]))
    cursor = RemoteSqlCursor(gateway.stub(), "SELECT x FROM t")

    first = await cursor.to_array()
    second = await cursor.to_array()
    raw = await cursor.raw()
    one = await cursor.one()

    assert first == second == [{"x": 1}, {"x": 2}]
    assert first is not second
    assert raw == [[1], [2]]
    assert one == {"x": 1}
    assert len(gateway.requests) == 1


@pytest.mark.asyncio
async def test_posts_query_request_with_authorization():
    gateway = RecordingGateway(payload=_envelope([], []))

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT ?", [5, "a", None], authorization="Basic abc")
    await cursor.to_array()

    request = gateway.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/query/raw"
    assert request.headers["authorization"] == "Basic abc"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"sql": "SELECT ?", "params": [5, "a", None]}


@pytest.mark.asyncio
async def test_binary_values_are_encoded_and_decoded():
    gateway = RecordingGateway(payload=_envelope(["data"], [[[0, 1, 255]]]))

    cursor = remote_exec(gateway.stub(), "SELECT ?", b"\x00\x01\xff")

    assert await cursor.one() == {"data": b"\x00\x01\xff"}
    assert json.loads(gateway.requests[0].content)["params"] == [[0, 1, 255]]


@pytest.mark.asyncio
async def test_one_raises_on_empty_result():
    gateway = RecordingGateway(payload=_envelope(["x"], []))

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT x FROM t WHERE 0")

    with pytest.raises(NoRowsError):
        await cursor.one()
    assert await cursor.to_array() == []


@pytest.mark.asyncio
async def test_http_failure_surfaces_on_read():
    gateway = RecordingGateway(status_code=401, text="Authentication required")

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT 1")

    with pytest.raises(RemoteQueryError, match="SQL execution failed: Authentication required"):
        await cursor.to_array()
    # The failure is memoized; later reads raise it again without a new request.
    with pytest.raises(RemoteQueryError):
        await cursor.next()
    assert len(gateway.requests) == 1


@pytest.mark.asyncio
async def test_envelope_error_surfaces_on_read():
    gateway = RecordingGateway(payload={"result": None, "error": "no such table: nope"})

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT * FROM nope")

    with pytest.raises(RemoteQueryError) as exc_info:
        await cursor.one()
    assert str(exc_info.value) == "no such table: nope"


@pytest.mark.asyncio
async def test_transport_error_surfaces_on_read():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    stub = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://internal")

    cursor = RemoteSqlCursor(stub, "SELECT 1")

    with pytest.raises(RemoteQueryError, match="connection refused"):
        await cursor.raw()


@pytest.mark.parametrize(
    "payload",
    [
        {"result": {"columns": ["x"]}, "error": None},
        {"result": [{"columns": ["x"], "rows": 5}], "error": None},
        {"result": [1], "error": None},
    ],
)
@pytest.mark.asyncio
async def test_unexpected_result_shape_surfaces_on_read(payload):
    gateway = RecordingGateway(payload=payload)

    cursor = RemoteSqlCursor(gateway.stub(), "SELECT x FROM t")

    with pytest.raises(RemoteQueryError, match="SQL execution failed: unexpected response body"):
        await cursor.to_array()
    with pytest.raises(RemoteQueryError):
        await cursor.next()


@pytest.mark.asyncio
async def test_next_only_moves_forward():
    gateway = RecordingGateway(payload=_envelope(["n"], [[1], [2]]))
    cursor = RemoteSqlCursor(gateway.stub(), "SELECT n FROM t")

    assert await cursor.next() == {"n": 1}
    assert await cursor.next() == {"n": 2}
    assert await cursor.next() is None
    assert await cursor.next() is None
    assert await cursor.to_array() == [{"n": 1}, {"n": 2}]


@pytest.mark.asyncio
async def test_async_iteration_and_raw_iterate():
    gateway = RecordingGateway(payload=_envelope(["a", "b"], [[1, "x"], [2, "y"]]))
    cursor = RemoteSqlCursor(gateway.stub(), "SELECT a, b FROM t")

    rows = [row async for row in cursor]
    raw_rows = [row async for row in cursor.raw_iterate()]

    assert rows == [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]
    assert raw_rows == [[1, "x"], [2, "y"]]


@pytest.mark.asyncio
async def test_raw_keeps_duplicate_columns():
    gateway = RecordingGateway(payload=_envelope(["id", "id"], [[1, 2]]))
    cursor = RemoteSqlCursor(gateway.stub(), "SELECT 1 AS id, 2 AS id")

    assert await cursor.raw() == [[1, 2]]
    assert cursor.column_names == ["id", "id"]


@pytest.mark.asyncio
async def test_get_exec_binds_stub_and_authorization():
    gateway = RecordingGateway(payload=_envelope(["x"], [[1]]))
    exec_fn = get_exec(gateway.stub(), authorization="Basic xyz")

    cursor = exec_fn("SELECT ?", 1)

    assert await cursor.one() == {"x": 1}
    assert gateway.requests[0].headers["authorization"] == "Basic xyz"
    assert json.loads(gateway.requests[0].content)["params"] == [1]


@pytest.mark.asyncio
async def test_make_stub_appends_to_base_path():
    gateway = RecordingGateway(payload=_envelope([], []))
    stub = make_stub(
        "http://gateway.local/tenants/acme",
        base_headers={"X-Data-Source": "internal"},
        transport=httpx.MockTransport(gateway),
    )

    await remote_exec(stub, "SELECT 1").to_array()

    request = gateway.requests[0]
    assert request.url.path == "/tenants/acme/query/raw"
    assert request.headers["x-data-source"] == "internal"
