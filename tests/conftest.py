import re
from contextlib import contextmanager

import psycopg
import pytest
from psycopg.conninfo import conninfo_to_dict
from psycopg_pool import PoolTimeout

from pgbootstrap.models import (
    ApplicationIdentity,
    BootstrapConfig,
    ConnectionTarget,
    RootIdentity,
)
from pgbootstrap.services.connection import ConnectionService

_QUOTED = re.compile(r"(Identifier|Literal)\(\(?'([^']*)'")


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class FakeServer:
    """In-memory stand-in for the PostgreSQL catalog the bootstrap touches."""

    def __init__(self, roles=None, databases=None, memberships=None):
        self.roles = {"root": "rootpw"}
        self.roles.update(roles or {})
        self.databases = {"postgres": "root"}
        self.databases.update(databases or {})
        self.memberships = set(memberships or ())
        self.statements = []
        self.failures = {}
        self.refuse_users = set()
        self.connections = []
        self.pools = []
        self.membership_seen_during_create = None

    def fail_on(self, fragment, exc):
        self.failures[fragment] = exc

    def mutations(self):
        return [text for text in self.statements if not text.startswith("SELECT")]

    def connect(self, conninfo, autocommit=False, **_kwargs):
        params = conninfo_to_dict(conninfo)
        if params.get("user") in self.refuse_users:
            raise psycopg.OperationalError(
                f'password authentication failed for user "{params.get("user")}"'
            )
        conn = FakeConnection(self, params, autocommit)
        self.connections.append(conn)
        return conn

    def pool_factory(self, conninfo, min_size, max_size, open, name, **_kwargs):
        pool = FakePool(self, conninfo, min_size, max_size, name)
        assert open is False
        self.pools.append(pool)
        return pool

    def run(self, query, params, session):
        text = query if isinstance(query, str) else repr(query)
        self.statements.append(text)

        for fragment, exc in self.failures.items():
            if fragment in text:
                raise exc

        if isinstance(query, str):
            if "FROM pg_roles" in text:
                return [(1,)] if params[0] in self.roles else []
            if "FROM pg_database" in text:
                return [(1,)] if params[0] in self.databases else []
            if "current_user" in text:
                return [(session["user"], session["dbname"])]
            return []

        names = [value for _kind, value in _QUOTED.findall(text)]
        if "CREATE USER" in text:
            if names[0] in self.roles:
                raise psycopg.errors.DuplicateObject(f'role "{names[0]}" already exists')
            self.roles[names[0]] = names[1]
        elif "GRANT" in text:
            self.memberships.add((names[0], names[1]))
        elif "CREATE DATABASE" in text:
            if names[0] in self.databases:
                raise psycopg.errors.DuplicateDatabase(f'database "{names[0]}" already exists')
            self.membership_seen_during_create = (names[1], session["user"]) in self.memberships
            self.databases[names[0]] = names[1]
        elif "REVOKE" in text:
            self.memberships.discard((names[0], names[1]))
        return []


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rows = []

    def __enter__(self):
        return self

    def __exit__(self, *_exc):
        return False

    def execute(self, query, params=None):
        if self.conn.closed:
            raise psycopg.OperationalError("the connection is closed")
        self.rows = list(self.conn.server.run(query, params, self.conn.params))

    def fetchone(self):
        return self.rows.pop(0) if self.rows else None


class FakeConnection:
    def __init__(self, server, params, autocommit):
        self.server = server
        self.params = params
        self.autocommit = autocommit
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True


class FakePool:
    def __init__(self, server, conninfo, min_size, max_size, name):
        self.server = server
        self.params = conninfo_to_dict(conninfo)
        self.min_size = min_size
        self.max_size = max_size
        self.name = name
        self.opened = False
        self.closed = False

    def open(self, wait=False, timeout=30.0):
        if self.params.get("user") in self.server.refuse_users:
            raise PoolTimeout(f"pool '{self.name}' couldn't be ready in {timeout} sec")
        self.opened = True

    @contextmanager
    def connection(self):
        yield FakeConnection(self.server, self.params, autocommit=False)

    def close(self):
        self.closed = True


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def connection_service(server):
    return ConnectionService(
        logger=DummyLogger(),
        connect=server.connect,
        pool_factory=server.pool_factory,
    )


def make_config(app_password="svcpw", **overrides):
    values = {
        "root": RootIdentity("root", "rootpw", "postgres"),
        "application": ApplicationIdentity("svc", app_password, "svcdb"),
        "target": ConnectionTarget("localhost", 5432),
    }
    values.update(overrides)
    return BootstrapConfig(**values)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def config_factory():
    return make_config
