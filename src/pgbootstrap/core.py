import logging
from typing import Callable, List, Optional

from psycopg_pool import ConnectionPool
from rich.console import Console

from .constants import LOGGER_NAME
from .errors import BootstrapError
from .models import POOL_OPENED, BootstrapConfig, BootstrapEvent
from .services.connection import ConnectionService
from .services.database import DatabaseProvisioner
from .services.report import ReportService
from .services.role import RoleProvisioner
from .services.statement_runner import StatementRunner
from .services.validation import ValidationService

console = Console()
logger = logging.getLogger(LOGGER_NAME)


def log_event(event: BootstrapEvent) -> None:
    if event.detail:
        logger.info("%s: %s (%s)", event.kind, event.subject, event.detail)
    else:
        logger.info("%s: %s", event.kind, event.subject)


class Bootstrapper:
    """Provisions the application role and database, then hands back a pool.

    Safe to run repeatedly: every mutation is preceded by a catalog lookup and
    skipped when the object is already there. All provisioning happens on one
    privileged connection that is closed before ``bootstrap`` returns.
    """

    def __init__(
        self,
        config: BootstrapConfig,
        notify: Optional[Callable[[BootstrapEvent], None]] = None,
        connection_service: Optional[ConnectionService] = None,
        report: Optional[ReportService] = None,
    ):
        self.config = config
        self.notify = notify or log_event
        self.report = report or ReportService(report_file=None, logger=logger)

        self.validation_service = ValidationService()
        self.connection_service = connection_service or ConnectionService(logger=logger)
        self.statement_runner = StatementRunner(logger=logger)
        self.role_provisioner = RoleProvisioner(
            logger=logger,
            statement_runner=self.statement_runner,
            notify=self._emit,
        )
        self.database_provisioner = DatabaseProvisioner(
            logger=logger,
            statement_runner=self.statement_runner,
            notify=self._emit,
        )

    def _emit(self, event: BootstrapEvent):
        self.report.add_event(event)
        self.notify(event)

    def _run_step(self, name: str, callback, *args, **kwargs):
        self.report.step_started(name)
        try:
            result = callback(*args, **kwargs)
        except Exception as exc:
            self.report.step_finished(name, "failed", error=str(exc))
            raise
        self.report.step_finished(name, "success")
        return result

    def _open_root_connection(self):
        return self.connection_service.open_root_connection(self.config.root, self.config.target)

    def bootstrap(self) -> ConnectionPool:
        """Run the provisioning sequence and return a pool for the application role.

        The caller owns the returned pool and is responsible for closing it.
        """
        root = self.config.root
        application = self.config.application
        target = self.config.target

        self.validation_service.validate_config(self.config)
        logger.debug("Bootstrapping the database with %r", self.config)

        conn = self._run_step("connect_root", self._open_root_connection)
        try:
            self._run_step("ensure_role", self.role_provisioner.ensure_role, conn, application)
            self._run_step(
                "ensure_database",
                self.database_provisioner.ensure_database,
                conn,
                root,
                application,
            )
        finally:
            conn.close()

        pool = self._run_step(
            "open_application_pool",
            self.connection_service.open_application_pool,
            application,
            target,
            self.config.pool,
        )
        self._emit(
            BootstrapEvent(
                POOL_OPENED,
                application.database_name,
                f"{application.username}@{target.host}:{target.port}",
            )
        )
        return pool

    def plan(self) -> List[str]:
        """Return the mutating steps ``bootstrap`` would run, without running them."""
        application = self.config.application

        self.validation_service.validate_config(self.config)

        steps: List[str] = []
        conn = self._run_step("connect_root", self._open_root_connection)
        try:
            if not self.role_provisioner.role_exists(conn, application.username):
                steps.append("create_role")

            if not self.database_provisioner.database_exists(conn, application.database_name):
                steps.extend(["grant_membership", "create_database", "revoke_membership"])
        finally:
            conn.close()

        return steps

    def _target_summary(self):
        return {
            "host": self.config.target.host,
            "port": self.config.target.port,
            "root_username": self.config.root.username,
            "root_database": self.config.root.database_name,
            "app_username": self.config.application.username,
            "app_database": self.config.application.database_name,
        }

    def run(self, dry_run: bool = False) -> int:
        status = "failed"
        error: Optional[str] = None

        try:
            self.report.start_run(self._target_summary())
            logger.info(
                "Starting bootstrap of %s on %s:%s...",
                self.config.application.database_name,
                self.config.target.host,
                self.config.target.port,
            )

            if dry_run:
                steps = self.plan()
                if steps:
                    console.print("[blue]Planned steps:[/blue]")
                    for step in steps:
                        console.print(f"  - {step}")
                else:
                    console.print("[green]Nothing to do, role and database already exist.[/green]")
                status = "planned"
                return 0

            pool = self.bootstrap()
            pool.close()
            console.print(
                f"[bold green]Bootstrap complete! `{self.config.application.username}` owns "
                f"`{self.config.application.database_name}`.[/bold green]"
            )
            status = "success"
            return 0

        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            logger.info("Operation cancelled by user")
            status = "aborted"
            error = "Operation cancelled by user."
            return 1
        except BootstrapError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            logger.error(str(exc))
            error = str(exc)
            return 1
        except Exception as exc:
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            logger.exception("Unexpected error")
            error = str(exc)
            return 1
        finally:
            self.report.finalize(status, error=error)
