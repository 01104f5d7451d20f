from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)


class SqlCursor:
    """Materialized result of one statement run through SQLAlchemy."""

    def __init__(self, columns: Sequence[str], rows: List[List[Any]], rows_written: int = 0):
        self._columns = list(columns)
        self._rows = rows
        self._rows_written = rows_written

    @property
    def column_names(self) -> List[str]:
        return self._columns

    @property
    def rows_read(self) -> int:
        return len(self._rows)

    @property
    def rows_written(self) -> int:
        return self._rows_written

    def raw(self) -> Iterator[List[Any]]:
        return iter(self._rows)

    def to_array(self) -> List[Dict[str, Any]]:
        return [dict(zip(self._columns, row)) for row in self._rows]

    def one(self) -> Dict[str, Any]:
        rows = self.to_array()
        if not rows:
            raise ValueError("No rows returned")
        return rows[0]


class SQLAlchemyExecutor:
    """
    Execution adapter over a SQLAlchemy engine.
    Each call runs one statement, with positional driver parameters, in its own
    committed transaction.
    """
    def __init__(self, connection_string: Optional[str] = None, engine: Optional[Engine] = None):
        self.connection_string = connection_string
        self.engine: Optional[Engine] = engine
        if engine is None and connection_string:
            self.connect()

    def __str__(self):
        url = self.engine.url.render_as_string(hide_password=True) if self.engine else self.connection_string
        return f"SQLAlchemyExecutor({url})"

    def connect(self) -> None:
        conn_str = self.connection_string
        if not conn_str:
            raise ValueError(f"Connection string is required for {self}")
        try:
            url = make_url(conn_str)
            if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
                # In-memory databases live on one shared connection.
                self.engine = create_engine(
                    url,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                self.engine = create_engine(url, pool_pre_ping=True)
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise

    def __call__(self, sql: str, *params: Any) -> SqlCursor:
        return self.execute(sql, *params)

    def execute(self, sql: str, *params: Any) -> SqlCursor:
        if not self.engine:
            raise RuntimeError(f"Not connected to {self}")

        with self.engine.begin() as conn:
            if params:
                result = conn.exec_driver_sql(sql, tuple(params))
            else:
                result = conn.exec_driver_sql(sql)

            if result.returns_rows:
                cols = list(result.keys())
                rows = [list(row) for row in result.fetchall()]
                return SqlCursor(cols, rows)

            rows_written = result.rowcount if result.rowcount and result.rowcount > 0 else 0
            return SqlCursor([], [], rows_written=rows_written)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
