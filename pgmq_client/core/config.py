import os
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, ConfigDict, field_validator


DEFAULT_POOL_SIZE = 5
DEFAULT_POOL_TIMEOUT = 5.0

_ENV_LOADED = False

# libpq keyword -> environment variable
_CONNECTION_ENV = {
    "host": "POSTGRES_HOST",
    "port": "POSTGRES_PORT",
    "dbname": "POSTGRES_DB",
    "user": "POSTGRES_USER",
    "password": "POSTGRES_PASSWORD",
}


def _load_env_file(path: str, allow_override: bool = False) -> None:
    """
    Minimal .env loader: loads KEY=VALUE pairs into os.environ.
    - Ignores empty lines and lines starting with '#'
    - Supports values wrapped in single or double quotes
    - By default, does not override existing environment variables
    """
    if not path or not os.path.exists(path):
        return
    with open(path, "r", encoding="utf-8") as f:
        for raw_line in f:
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):].strip()
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()
            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]
            if allow_override or key not in os.environ:
                os.environ[key] = value


def load_env_if_present(force_reload: bool = False) -> None:
    """
    Load environment variables from PGMQ_ENV_FILE when set, otherwise from
    .env.local then .env in the working directory.
    """
    global _ENV_LOADED
    if _ENV_LOADED and not force_reload:
        return

    custom = os.environ.get("PGMQ_ENV_FILE")
    if custom:
        _load_env_file(custom, allow_override=False)
    else:
        for env_file in ('.env.local', '.env'):
            _load_env_file(env_file, allow_override=False)

    _ENV_LOADED = True


class Settings(BaseModel):
    """
    Client defaults resolved from environment variables.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    postgres_host: Optional[str] = Field(None, alias="POSTGRES_HOST")
    postgres_port: Optional[int] = Field(None, alias="POSTGRES_PORT")
    postgres_db: Optional[str] = Field(None, alias="POSTGRES_DB")
    postgres_user: Optional[str] = Field(None, alias="POSTGRES_USER")
    postgres_password: Optional[str] = Field(None, alias="POSTGRES_PASSWORD", repr=False)

    pool_size: int = Field(DEFAULT_POOL_SIZE, alias="PGMQ_POOL_SIZE", ge=1)
    pool_timeout: float = Field(DEFAULT_POOL_TIMEOUT, alias="PGMQ_POOL_TIMEOUT", gt=0)
    auto_reconnect: bool = Field(True, alias="PGMQ_AUTO_RECONNECT")

    @field_validator('postgres_host', 'postgres_db', 'postgres_user', 'postgres_password', mode='before')
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('postgres_port', mode='before')
    def coerce_port(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        port = int(v)
        if port < 1 or port > 65535:
            raise ValueError(f"Invalid port number: {port}")
        return port

    @field_validator('auto_reconnect', mode='before')
    def coerce_bool(cls, v):
        if isinstance(v, bool):
            return v
        if not isinstance(v, str):
            raise ValueError("Expected string for boolean field")
        val = v.strip().lower()
        if val in ("true", "1", "yes", "y", "on"):
            return True
        if val in ("false", "0", "no", "n", "off"):
            return False
        raise ValueError(f"Invalid boolean value: {v}")

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        values: Dict[str, Any] = {}
        for name in list(_CONNECTION_ENV.values()) + ["PGMQ_POOL_SIZE", "PGMQ_POOL_TIMEOUT", "PGMQ_AUTO_RECONNECT"]:
            if name in env:
                values[name] = env[name]
        return cls(**values)

    def connection_params(self) -> Dict[str, Any]:
        """libpq keyword parameters for every connection variable that is set."""
        params = {
            "host": self.postgres_host,
            "port": self.postgres_port,
            "dbname": self.postgres_db,
            "user": self.postgres_user,
            "password": self.postgres_password,
        }
        return {key: value for key, value in params.items() if value is not None}


_settings: Optional[Settings] = None


def get_settings(reload: bool = False) -> Settings:
    """
    Get client settings, loading .env files on first use.
    Set reload=True to re-read the current environment.
    """
    global _settings
    if _settings is None or reload:
        load_env_if_present(force_reload=reload)
        _settings = Settings.from_env()
    return _settings


__all__ = [
    "DEFAULT_POOL_SIZE",
    "DEFAULT_POOL_TIMEOUT",
    "Settings",
    "get_settings",
    "load_env_if_present",
]
