import logging
import os

import click
from rich.logging import RichHandler

from .constants import DEFAULT_CONFIG_FILE, LOGGER_NAME
from .core import Bootstrapper
from .errors import BootstrapError
from .services.config_loader import ConfigLoader
from .services.report import ReportService

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


def _merge_settings(cli_values, config_values, env_values):
    merged = dict(env_values)
    merged.update(config_values)
    merged.update({key: value for key, value in cli_values.items() if value is not None})
    return merged


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--root-username", required=False, help="Privileged role used for provisioning.")
@click.option("--root-password", required=False, help="Password of the privileged role.")
@click.option("--root-database", required=False, help="Database the privileged role connects to.")
@click.option("--app-username", required=False, help="Application role to provision.")
@click.option("--app-password", required=False, help="Password for a newly created application role.")
@click.option("--app-database", required=False, help="Application database to provision.")
@click.option("--database-host", required=False, help="PostgreSQL server host.")
@click.option("--database-port", required=False, type=int, help="PostgreSQL server port.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Inspect the server and print the planned steps without changing anything.",
)
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option("--report-file", type=click.Path(), help="Write a JSON run report to this path.")
def main(
    config,
    root_username,
    root_password,
    root_database,
    app_username,
    app_password,
    app_database,
    database_host,
    database_port,
    dry_run,
    verbose,
    log_file,
    report_file,
):
    """Create the application role and database on a PostgreSQL server if missing.

    Settings come from command-line options, then the config file, then the
    ROOT_*, APP_* and DATABASE_* environment variables.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        settings = _merge_settings(
            {
                "root_username": root_username,
                "root_password": root_password,
                "root_database": root_database,
                "app_username": app_username,
                "app_password": app_password,
                "app_database": app_database,
                "database_host": database_host,
                "database_port": database_port,
            },
            config_loader.load(resolved_config),
            config_loader.from_environ(),
        )
        bootstrap_config = config_loader.build(settings)
    except BootstrapError as exc:
        raise click.ClickException(str(exc)) from exc

    bootstrapper = Bootstrapper(
        bootstrap_config,
        report=ReportService(report_file=report_file, logger=logger),
    )
    raise SystemExit(bootstrapper.run(dry_run=dry_run))


if __name__ == "__main__":
    main()
