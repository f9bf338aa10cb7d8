import pytest
from pydantic import ValidationError

from pgmq_client.core import config
from pgmq_client.core.config import Settings, get_settings


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})

    assert settings.pool_size == config.DEFAULT_POOL_SIZE
    assert settings.pool_timeout == config.DEFAULT_POOL_TIMEOUT
    assert settings.auto_reconnect is True
    assert settings.connection_params() == {}


def test_connection_params_from_environment():
    settings = Settings.from_env({
        "POSTGRES_HOST": "db",
        "POSTGRES_PORT": "5433",
        "POSTGRES_DB": "queues",
        "POSTGRES_USER": "worker",
        "POSTGRES_PASSWORD": "secret",
        "PGMQ_POOL_SIZE": "10",
        "PGMQ_POOL_TIMEOUT": "2.5",
        "PGMQ_AUTO_RECONNECT": "off",
    })

    assert settings.connection_params() == {
        "host": "db",
        "port": 5433,
        "dbname": "queues",
        "user": "worker",
        "password": "secret",
    }
    assert settings.pool_size == 10
    assert settings.pool_timeout == 2.5
    assert settings.auto_reconnect is False


def test_blank_values_are_treated_as_unset():
    settings = Settings.from_env({"POSTGRES_HOST": "  ", "POSTGRES_PORT": ""})
    assert settings.connection_params() == {}


def test_password_is_hidden_from_repr():
    settings = Settings.from_env({"POSTGRES_PASSWORD": "secret"})
    assert "secret" not in repr(settings)


@pytest.mark.parametrize("env", [
    {"POSTGRES_PORT": "70000"},
    {"PGMQ_POOL_SIZE": "0"},
    {"PGMQ_POOL_TIMEOUT": "0"},
    {"PGMQ_AUTO_RECONNECT": "maybe"},
])
def test_invalid_values_are_rejected(env):
    with pytest.raises(ValidationError):
        Settings.from_env(env)


def test_get_settings_reads_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / "pgmq.env"
    env_file.write_text(
        "# local database\n"
        "export POSTGRES_HOST=filehost\n"
        "POSTGRES_DB='from_file'\n"
        "POSTGRES_USER=ignored\n"
    )
    monkeypatch.setattr(config, "_settings", None)
    monkeypatch.setattr(config, "_ENV_LOADED", False)
    for name in ("POSTGRES_HOST", "POSTGRES_DB", "POSTGRES_PORT", "POSTGRES_PASSWORD"):
        # recorded so values loaded from the file are removed afterwards
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("POSTGRES_USER", "from_env")
    monkeypatch.setenv("PGMQ_ENV_FILE", str(env_file))

    settings = get_settings()

    assert settings.postgres_host == "filehost"
    assert settings.postgres_db == "from_file"
    # existing variables win over the file
    assert settings.postgres_user == "from_env"
    assert get_settings() is settings
