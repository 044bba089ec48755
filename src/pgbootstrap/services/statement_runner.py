"""SQL statement execution service for pgbootstrap."""

from typing import Any, Optional, Sequence

import psycopg

from pgbootstrap.errors import StatementFailedError
from pgbootstrap.errors_catalog import actionable_error


class StatementRunner:
    """Runs provisioning statements with consistent error handling.

    ``label`` is what gets logged and reported instead of the statement itself,
    so that inline passwords never reach a log line or an error message.
    """

    def __init__(self, logger):
        self.logger = logger

    def execute(
        self,
        conn,
        query,
        params: Optional[Sequence[Any]] = None,
        label: str = "",
        catalog_code: str = "statement_failed",
    ) -> None:
        self._run(conn, query, params, label, catalog_code, fetch=False)

    def fetch_one(
        self,
        conn,
        query,
        params: Optional[Sequence[Any]] = None,
        label: str = "",
    ) -> Optional[tuple]:
        return self._run(conn, query, params, label, "statement_failed", fetch=True)

    def _run(self, conn, query, params, label, catalog_code, fetch):
        statement = label or str(query)
        self.logger.debug("Executing: %s", statement)

        try:
            with conn.cursor() as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone() if fetch else None
        except psycopg.Error as exc:
            raise StatementFailedError(
                actionable_error(catalog_code, statement=statement, error=_first_line(exc)),
                statement=statement,
                cause=exc,
            ) from exc

        if fetch:
            self.logger.debug("Result: %s", "row" if row is not None else "no rows")
        return row


def _first_line(exc: BaseException) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else exc.__class__.__name__
