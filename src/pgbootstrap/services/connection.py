"""Connection and pool handling for pgbootstrap."""

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool, PoolTimeout

from pgbootstrap.errors import ConnectionFailedError
from pgbootstrap.errors_catalog import actionable_error

IDENTITY_QUERY = "SELECT current_user, current_database()"


class ConnectionService:
    """Opens the privileged connection and the application pool."""

    def __init__(self, logger, connect=psycopg.connect, pool_factory=ConnectionPool):
        self.logger = logger
        self.connect = connect
        self.pool_factory = pool_factory

    @staticmethod
    def build_conninfo(identity, target) -> str:
        return make_conninfo(
            host=target.host,
            port=target.port,
            dbname=identity.database_name,
            user=identity.username,
            password=identity.password,
            connect_timeout=target.connect_timeout,
            sslmode=target.sslmode,
        )

    def open_root_connection(self, root, target):
        """Autocommit is required: CREATE DATABASE refuses to run inside a transaction."""
        self.logger.debug(
            "Connecting to %s:%s/%s as %s", target.host, target.port, root.database_name, root.username
        )
        try:
            return self.connect(self.build_conninfo(root, target), autocommit=True)
        except psycopg.Error as exc:
            raise ConnectionFailedError(
                actionable_error(
                    "root_connection_failed",
                    host=target.host,
                    port=target.port,
                    database=root.database_name,
                    username=root.username,
                    error=str(exc).strip(),
                ),
                identity="root",
                cause=exc,
            ) from exc

    def open_application_pool(self, application, target, pool_settings) -> ConnectionPool:
        self.logger.debug(
            "Opening pool on %s:%s/%s as %s (min=%s, max=%s)",
            target.host,
            target.port,
            application.database_name,
            application.username,
            pool_settings.min_size,
            pool_settings.max_size,
        )
        pool = self.pool_factory(
            conninfo=self.build_conninfo(application, target),
            min_size=pool_settings.min_size,
            max_size=pool_settings.max_size,
            open=False,
            name=f"pgbootstrap-{application.database_name}",
        )

        try:
            pool.open(wait=True, timeout=pool_settings.open_timeout)
            self._verify_identity(pool, application)
        except (PoolTimeout, psycopg.Error) as exc:
            pool.close()
            raise self._application_error(application, target, exc) from exc
        except ConnectionFailedError:
            pool.close()
            raise

        return pool

    def _verify_identity(self, pool, application):
        with pool.connection() as conn:
            with conn.cursor() as cursor:
                cursor.execute(IDENTITY_QUERY)
                row = cursor.fetchone()

        expected = (application.username, application.database_name)
        if row is None or tuple(row) != expected:
            raise ConnectionFailedError(
                f"Application pool is connected as {tuple(row) if row else None}, "
                f"expected {expected}.",
                identity="application",
            )

    @staticmethod
    def _application_error(application, target, exc) -> ConnectionFailedError:
        return ConnectionFailedError(
            actionable_error(
                "application_connection_failed",
                host=target.host,
                port=target.port,
                database=application.database_name,
                username=application.username,
                error=str(exc).strip() or exc.__class__.__name__,
            ),
            identity="application",
            cause=exc,
        )
