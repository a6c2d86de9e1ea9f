"""
Async relational driver built on SQLAlchemy.

Results are flattened to text: one line per row, values separated by ", ".
Engines are created once per connection URL and reused across turns.
"""
import logging
import re
import threading
from typing import Dict

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from subject_router.core.exceptions import BackendError

# Keywords that are not allowed in generated queries
DANGEROUS_KEYWORDS = [
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "CREATE",
    "TRUNCATE",
    "MERGE",
    "GRANT",
    "REVOKE",
    "EXEC",
    "EXECUTE",
]

_KEYWORD_RE = re.compile(r"\b(" + "|".join(DANGEROUS_KEYWORDS) + r")\b", re.IGNORECASE)
_STRING_LITERAL_RE = re.compile(r"'(?:[^']|'')*'")


def _format_rows(rows) -> str:
    lines = []
    for row in rows:
        lines.append(", ".join("" if value is None else str(value) for value in row))
    return "\n".join(lines)


class SqlDriver:
    def __init__(self, read_only: bool = True, echo: bool = False):
        self.read_only = read_only
        self.echo = echo
        self._engines: Dict[str, AsyncEngine] = {}
        self._lock = threading.Lock()

    def _engine(self, connection: str) -> AsyncEngine:
        with self._lock:
            engine = self._engines.get(connection)
            if engine is None:
                engine = create_async_engine(connection, echo=self.echo, pool_pre_ping=True)
                self._engines[connection] = engine
            return engine

    def validate_query(self, query: str):
        """Reject data-modifying statements when the driver is read-only."""
        if not query or not query.strip():
            raise BackendError("Empty SQL query.")
        if not self.read_only:
            return
        stripped = _STRING_LITERAL_RE.sub("''", query)
        match = _KEYWORD_RE.search(stripped)
        if match:
            raise BackendError(f"Query contains disallowed keyword: {match.group(1).upper()}")

    async def describe_columns(self, connection: str, schema: str, table: str) -> str:
        """One `schema.table, column` line per column of the table."""
        def _columns(sync_conn):
            return inspect(sync_conn).get_columns(table, schema=schema)

        try:
            async with self._engine(connection).connect() as conn:
                columns = await conn.run_sync(_columns)
        except SQLAlchemyError as e:
            raise BackendError(f"Failed to describe {schema}.{table}: {e}") from e

        return "\n".join(f"{schema}.{table}, {column['name']}" for column in columns)

    async def execute(self, connection: str, query: str) -> str:
        self.validate_query(query)
        try:
            async with self._engine(connection).connect() as conn:
                result = await conn.exec_driver_sql(query)
                if not result.returns_rows:
                    return ""
                return _format_rows(result.fetchall())
        except SQLAlchemyError as e:
            raise BackendError(f"Query failed: {e}") from e

    async def can_connect(self, connection: str) -> bool:
        try:
            async with self._engine(connection).connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logging.warning(f"[SqlDriver] Connection failed: {e}")
            return False

    async def dispose(self):
        with self._lock:
            engines = list(self._engines.values())
            self._engines.clear()
        for engine in engines:
            await engine.dispose()
