from typing import Any, Dict, List, Sequence, Union
import logging

from browsable_sql.common.errors import QueryExecutionError
from browsable_sql.execution.cursor import (
    ExecFunction,
    realize_objects,
    realize_raw,
    run_exec,
    to_wire_row,
    to_wire_value,
)
from browsable_sql.models.query import QueryRequest, RawResult, ResultMeta

logger = logging.getLogger(__name__)


class QueryService:
    """Runs raw-query statements through the execution adapter."""

    def __init__(self, exec_fn: ExecFunction):
        self.exec_fn = exec_fn

    async def execute_query(
        self,
        sql: str,
        params: Sequence[Any] = (),
        is_raw: bool = False,
    ) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """Executes one statement.

        Args:
            sql (str): The statement text.
            params (Sequence[Any]): Positional bind values.
            is_raw (bool): Return the ``{columns, rows, meta}`` shape instead of row objects.

        Raises:
            QueryExecutionError: If the execution adapter raises.
        """
        try:
            cursor = await run_exec(self.exec_fn, sql, params)
            if not is_raw:
                rows = await realize_objects(cursor)
                return [{key: to_wire_value(value) for key, value in row.items()} for row in rows]

            rows = await realize_raw(cursor)
            result = RawResult(
                columns=list(cursor.column_names),
                rows=[to_wire_row(row) for row in rows],
                meta=ResultMeta(rows_read=cursor.rows_read, rows_written=cursor.rows_written),
            )
            return result.model_dump()
        except Exception as e:
            logger.error(f"SQL execution error: {e}")
            raise QueryExecutionError(e, statement=sql) from e

    async def execute_transaction(self, queries: Sequence[QueryRequest]) -> List[Dict[str, Any]]:
        """Executes statements in order, one raw result per statement.

        Stops at the first failure; statements already executed stay applied.
        """
        results = []
        for index, query in enumerate(queries):
            logger.debug("Executing statement %d of %d", index + 1, len(queries))
            results.append(await self.execute_query(query.sql, query.params, is_raw=True))
        return results
