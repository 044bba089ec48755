import pytest

from pgbootstrap.errors import ConfigMissingError, ConfigParseError, ConfigurationError
from pgbootstrap.services.config_loader import ConfigLoader, config_from_env


def _environ(**overrides):
    environ = {
        "ROOT_USERNAME": "root",
        "ROOT_PASSWORD": "rootpw",
        "ROOT_DATABASE": "postgres",
        "APP_USERNAME": "svc",
        "APP_PASSWORD": "svcpw",
        "APP_DATABASE": "svcdb",
        "DATABASE_HOST": "localhost",
        "DATABASE_PORT": "5432",
    }
    environ.update(overrides)
    return {key: value for key, value in environ.items() if value is not None}


def test_config_from_env_builds_full_config():
    config = config_from_env(_environ())

    assert config.root.username == "root"
    assert config.root.password == "rootpw"
    assert config.root.database_name == "postgres"
    assert config.application.username == "svc"
    assert config.application.password == "svcpw"
    assert config.application.database_name == "svcdb"
    assert config.target.host == "localhost"
    assert config.target.port == 5432
    assert config.pool.min_size == 1
    assert config.pool.max_size == 10


def test_config_repr_hides_passwords():
    config = config_from_env(_environ())

    assert "rootpw" not in repr(config)
    assert "svcpw" not in repr(config)


def test_config_from_env_reports_missing_variable():
    with pytest.raises(ConfigMissingError, match="APP_PASSWORD") as exc_info:
        config_from_env(_environ(APP_PASSWORD=None))

    assert exc_info.value.variable == "APP_PASSWORD"


def test_config_from_env_rejects_non_numeric_port():
    with pytest.raises(ConfigParseError, match="must be an integer") as exc_info:
        config_from_env(_environ(DATABASE_PORT="abc"))

    assert exc_info.value.variable == "DATABASE_PORT"
    assert exc_info.value.value == "abc"
    assert isinstance(exc_info.value, ConfigurationError)


@pytest.mark.parametrize("port", ["0", "65536", "-1"])
def test_config_from_env_rejects_port_outside_16_bit_range(port):
    with pytest.raises(ConfigParseError, match="between 1 and 65535"):
        config_from_env(_environ(DATABASE_PORT=port))


def test_config_from_env_reads_optional_settings():
    config = config_from_env(
        _environ(
            DATABASE_SSLMODE="require",
            DATABASE_CONNECT_TIMEOUT="3",
            POOL_MIN_SIZE="2",
            POOL_MAX_SIZE="4",
        )
    )

    assert config.target.sslmode == "require"
    assert config.target.connect_timeout == 3
    assert config.pool.min_size == 2
    assert config.pool.max_size == 4


def test_pool_max_size_below_min_size_is_rejected():
    with pytest.raises(ConfigParseError, match="pool_max_size"):
        config_from_env(_environ(POOL_MIN_SIZE="5", POOL_MAX_SIZE="2"))


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".pgbootstrap.yml"
    config_file.write_text(
        "app_username: svc\napp_database: svcdb\ndatabase_port: 6432\n",
        encoding="utf-8",
    )

    loaded = ConfigLoader().load(str(config_file))

    assert loaded == {"app_username": "svc", "app_database": "svcdb", "database_port": 6432}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".pgbootstrap.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unknown configuration keys"):
        ConfigLoader().load(str(config_file))


def test_config_loader_rejects_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "absent.yml"))


def test_build_rejects_boolean_port():
    loader = ConfigLoader()
    values = loader.from_environ(_environ())
    values["database_port"] = True

    with pytest.raises(ConfigParseError):
        loader.build(values)


def test_config_from_env_reads_pool_open_timeout():
    config = config_from_env(_environ(POOL_OPEN_TIMEOUT="2.5"))

    assert config.pool.open_timeout == 2.5


def test_config_from_env_rejects_non_numeric_pool_open_timeout():
    with pytest.raises(ConfigParseError, match="must be a number") as exc_info:
        config_from_env(_environ(POOL_OPEN_TIMEOUT="soon"))

    assert exc_info.value.variable == "POOL_OPEN_TIMEOUT"


def test_empty_port_is_reported_like_other_missing_settings():
    with pytest.raises(ConfigMissingError, match="Suggested action") as exc_info:
        config_from_env(_environ(DATABASE_PORT=""))

    assert exc_info.value.variable == "DATABASE_PORT"
    assert "--database-port" in str(exc_info.value)
