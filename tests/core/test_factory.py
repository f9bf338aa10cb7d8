import psycopg
import pytest

from pgmq_client.core.db import factory
from pgmq_client.core.errors import ConfigurationError, ConnectionError, ErrorKind


class FakeAdapters:
    def __init__(self):
        self.loaders = {}

    def register_loader(self, type_name, loader):
        self.loaders[type_name] = loader


class FakeRawConnection:
    def __init__(self):
        self.adapters = FakeAdapters()


def test_callable_params_are_kept_as_is():
    def opener():
        return "conn"

    assert factory.normalize_connection_params(opener) is opener


def test_connection_string_is_parsed_into_keywords():
    params = factory.normalize_connection_params("host=localhost port=5432 dbname=app user=worker")
    assert params == {"host": "localhost", "port": "5432", "dbname": "app", "user": "worker"}


def test_mapping_params_are_copied():
    source = {"host": "localhost", "dbname": "app"}
    params = factory.normalize_connection_params(source)
    assert params == source
    assert params is not source


@pytest.mark.parametrize("params, message", [
    (None, "Connection parameters are required"),
    ({}, "Invalid connection parameters format"),
    (12, "Invalid connection parameters format"),
    (["host=localhost"], "Invalid connection parameters format"),
])
def test_unusable_params_raise_configuration_error(params, message):
    with pytest.raises(ConfigurationError, match=message):
        factory.normalize_connection_params(params)


def test_unparseable_connection_string_raises_configuration_error():
    with pytest.raises(ConfigurationError, match="Invalid connection string"):
        factory.parse_connection_string("definitely not a conninfo")


def test_create_connection_invokes_callable_verbatim():
    sentinel = object()
    assert factory.create_connection(lambda: sentinel) is sentinel


def test_create_connection_applies_session_settings(monkeypatch):
    captured = {}
    raw = FakeRawConnection()

    def fake_connect(conninfo, **kwargs):
        captured["conninfo"] = conninfo
        captured.update(kwargs)
        return raw

    monkeypatch.setattr(factory.psycopg, "connect", fake_connect)

    conn = factory.create_connection({"host": "localhost", "dbname": "app", "conninfo": "sslmode=disable"})

    assert conn is raw
    assert captured["conninfo"] == "sslmode=disable"
    assert captured["autocommit"] is True
    assert captured["prepare_threshold"] is None
    assert captured["row_factory"] is factory.dict_row
    assert captured["host"] == "localhost"
    assert set(raw.adapters.loaders) == {"json", "jsonb"}


def test_user_keywords_override_session_defaults(monkeypatch):
    captured = {}

    def fake_connect(conninfo, **kwargs):
        captured.update(kwargs)
        return FakeRawConnection()

    monkeypatch.setattr(factory.psycopg, "connect", fake_connect)

    factory.create_connection({"host": "localhost", "connect_timeout": 3, "autocommit": False})

    assert captured["autocommit"] is False
    assert captured["connect_timeout"] == 3


def test_connect_failure_raises_connection_error(monkeypatch):
    def fake_connect(conninfo, **kwargs):
        raise psycopg.OperationalError("connection refused")

    monkeypatch.setattr(factory.psycopg, "connect", fake_connect)

    with pytest.raises(ConnectionError) as exc_info:
        factory.create_connection({"host": "localhost", "password": "hunter2"})

    assert exc_info.value.kind == ErrorKind.CONNECT_FAILED
    assert str(exc_info.value) == "Failed to connect to database: connection refused"
