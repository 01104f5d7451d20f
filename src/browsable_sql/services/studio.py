"""Studio bridge: runs browsing-UI commands and reshapes results for it."""
import time
from typing import Any, Dict, List, Sequence, Union
import logging

from browsable_sql.common.errors import QueryExecutionError
from browsable_sql.execution.cursor import ExecFunction, realize_raw, run_exec, to_wire_value
from browsable_sql.models.studio import (
    StudioColumn,
    StudioCommand,
    StudioQueryCommand,
    StudioResult,
    StudioStat,
)

logger = logging.getLogger(__name__)

MAX_RENAME_ATTEMPTS = 20


def build_studio_headers(column_names: Sequence[str]) -> List[StudioColumn]:
    """Builds column descriptors with unique ``name`` values.

    A colliding column ``c`` is renamed ``__c_0``, ``__c_1``, ... for at most
    ``MAX_RENAME_ATTEMPTS`` attempts; after that the last candidate is kept even
    if it still collides. ``displayName`` always holds the original name.
    """
    seen = set()
    headers = []
    for column_name in column_names:
        name = column_name
        for attempt in range(MAX_RENAME_ATTEMPTS):
            if name not in seen:
                break
            name = f"__{column_name}_{attempt}"
        seen.add(name)
        headers.append(StudioColumn(name=name, displayName=column_name))
    return headers


def shape_studio_result(
    column_names: Sequence[str],
    rows: Sequence[Sequence[Any]],
    rows_read: int,
    rows_written: int,
    duration_ms: float = 0,
) -> StudioResult:
    headers = build_studio_headers(column_names)
    return StudioResult(
        headers=headers,
        rows=[
            {header.name: to_wire_value(value) for header, value in zip(headers, row)}
            for row in rows
        ],
        stat=StudioStat(
            queryDurationMs=duration_ms,
            rowsAffected=rows_written,
            rowsRead=rows_read,
            rowsWritten=rows_written,
        ),
    )


class StudioService:
    def __init__(self, exec_fn: ExecFunction):
        self.exec_fn = exec_fn

    async def execute_statement(self, statement: str) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            cursor = await run_exec(self.exec_fn, statement)
            rows = await realize_raw(cursor)
        except Exception as e:
            logger.error(f"Studio statement failed: {e}")
            raise QueryExecutionError(e, statement=statement) from e
        duration = time.perf_counter() - start

        result = shape_studio_result(
            cursor.column_names,
            rows,
            rows_read=cursor.rows_read,
            rows_written=cursor.rows_written,
            duration_ms=duration * 1000,
        )
        return result.model_dump()

    async def execute_command(self, command: StudioCommand) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Runs an already validated command; transactions run in order and stop at the first failure."""
        if isinstance(command, StudioQueryCommand):
            return await self.execute_statement(command.statement)

        results = []
        for statement in command.statements:
            results.append(await self.execute_statement(statement))
        return results
