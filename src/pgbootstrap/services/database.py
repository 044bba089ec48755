"""Application database provisioning for pgbootstrap."""

from psycopg import sql

from pgbootstrap.models import (
    DATABASE_CREATED,
    DATABASE_EXISTS,
    MEMBERSHIP_GRANTED,
    MEMBERSHIP_REVOKED,
    BootstrapEvent,
)

DATABASE_EXISTS_QUERY = "SELECT 1 FROM pg_database WHERE datname = %s"


class DatabaseProvisioner:
    """Creates the application database owned by the application role.

    The root session needs membership in the application role before it may
    name that role as owner, so the membership is granted for the duration of
    CREATE DATABASE and revoked right after. A failure between grant and revoke
    leaves the membership in place; nothing is rolled back automatically.
    """

    def __init__(self, logger, statement_runner, notify):
        self.logger = logger
        self.statement_runner = statement_runner
        self.notify = notify

    def database_exists(self, conn, database_name: str) -> bool:
        row = self.statement_runner.fetch_one(
            conn,
            DATABASE_EXISTS_QUERY,
            (database_name,),
            label=f"lookup database {database_name}",
        )
        return row is not None

    def ensure_database(self, conn, root, application) -> bool:
        """Create the application database. Returns False when it was already there."""
        database_name = application.database_name

        if self.database_exists(conn, database_name):
            self.notify(BootstrapEvent(DATABASE_EXISTS, database_name, "Database already exists"))
            return False

        self.grant_role_to_root(conn, root, application)
        self.create_database(conn, application)
        self.revoke_role_from_root(conn, root, application)
        return True

    def grant_role_to_root(self, conn, root, application):
        query = sql.SQL("GRANT {} TO {}").format(
            sql.Identifier(application.username),
            sql.Identifier(root.username),
        )
        self.statement_runner.execute(
            conn, query, label=f"GRANT {application.username} TO {root.username}"
        )
        self.notify(BootstrapEvent(MEMBERSHIP_GRANTED, application.username, root.username))

    def create_database(self, conn, application):
        query = sql.SQL("CREATE DATABASE {} OWNER {}").format(
            sql.Identifier(application.database_name),
            sql.Identifier(application.username),
        )
        self.statement_runner.execute(
            conn,
            query,
            label=f"CREATE DATABASE {application.database_name} OWNER {application.username}",
        )
        self.notify(
            BootstrapEvent(DATABASE_CREATED, application.database_name, application.username)
        )

    def revoke_role_from_root(self, conn, root, application):
        query = sql.SQL("REVOKE {} FROM {}").format(
            sql.Identifier(application.username),
            sql.Identifier(root.username),
        )
        self.statement_runner.execute(
            conn,
            query,
            label=f"REVOKE {application.username} FROM {root.username}",
            catalog_code="revoke_failed",
        )
        self.notify(BootstrapEvent(MEMBERSHIP_REVOKED, application.username, root.username))
