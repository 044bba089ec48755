"""Application role provisioning for pgbootstrap."""

from psycopg import sql

from pgbootstrap.models import ROLE_CREATED, ROLE_EXISTS, BootstrapEvent

ROLE_EXISTS_QUERY = "SELECT 1 FROM pg_roles WHERE rolname = %s"


class RoleProvisioner:
    """Creates the application login role unless it already exists."""

    def __init__(self, logger, statement_runner, notify):
        self.logger = logger
        self.statement_runner = statement_runner
        self.notify = notify

    def role_exists(self, conn, username: str) -> bool:
        row = self.statement_runner.fetch_one(
            conn,
            ROLE_EXISTS_QUERY,
            (username,),
            label=f"lookup role {username}",
        )
        return row is not None

    def ensure_role(self, conn, application) -> bool:
        """Create the application role. Returns False when it was already there.

        An existing role is left untouched, including its password.
        """
        username = application.username

        if self.role_exists(conn, username):
            self.notify(BootstrapEvent(ROLE_EXISTS, username, "Role already exists"))
            return False

        query = sql.SQL("CREATE USER {} PASSWORD {}").format(
            sql.Identifier(username),
            sql.Literal(application.password),
        )
        self.statement_runner.execute(conn, query, label=f"CREATE USER {username} PASSWORD ***")
        self.notify(BootstrapEvent(ROLE_CREATED, username))
        return True
