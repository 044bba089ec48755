"""Static settings shared across pgbootstrap."""

LOGGER_NAME = "pgbootstrap"
DEFAULT_CONFIG_FILE = ".pgbootstrap.yml"

# PostgreSQL NAMEDATALEN - 1; longer names are silently truncated by the server.
MAX_IDENTIFIER_BYTES = 63

MIN_PORT = 1
MAX_PORT = 65535

DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_POOL_MIN_SIZE = 1
DEFAULT_POOL_MAX_SIZE = 10
DEFAULT_POOL_OPEN_TIMEOUT = 30.0

# setting key -> environment variable
REQUIRED_SETTINGS = {
    "root_username": "ROOT_USERNAME",
    "root_password": "ROOT_PASSWORD",
    "root_database": "ROOT_DATABASE",
    "app_username": "APP_USERNAME",
    "app_password": "APP_PASSWORD",
    "app_database": "APP_DATABASE",
    "database_host": "DATABASE_HOST",
    "database_port": "DATABASE_PORT",
}

OPTIONAL_SETTINGS = {
    "database_connect_timeout": "DATABASE_CONNECT_TIMEOUT",
    "database_sslmode": "DATABASE_SSLMODE",
    "pool_min_size": "POOL_MIN_SIZE",
    "pool_max_size": "POOL_MAX_SIZE",
    "pool_open_timeout": "POOL_OPEN_TIMEOUT",
}
