"""Configuration helpers behind ``manage.py setup``.

The command collects answers interactively (or from options); everything
here is plain functions over a ``SetupAnswers`` so it can be tested without
a terminal.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured
from django.core.management.utils import get_random_secret_key
from django.db.utils import ConnectionHandler, DatabaseError

logger = logging.getLogger(__name__)

DB_TYPES = ("postgres", "mysql", "sqlite")
DEFAULT_DB_PORTS = {"postgres": "5432", "mysql": "3306", "sqlite": ""}
DB_ENGINES = {
    "postgres": "django.db.backends.postgresql",
    "mysql": "django.db.backends.mysql",
    "sqlite": "django.db.backends.sqlite3",
}
DEFAULT_REDIS_URI = "redis://localhost:6379/0"


class SetupCheckError(Exception):
    """Raised when a connectivity check fails."""


@dataclass
class SetupAnswers:
    db_type: str = "postgres"
    db_host: str = "localhost"
    db_port: str = ""
    db_username: str = ""
    db_password: str = ""
    db_name: str = "enfyra"
    redis_uri: str = DEFAULT_REDIS_URI
    app_port: str = "8000"
    allowed_hosts: str = "localhost,127.0.0.1"
    debug: bool = False
    admin_email: str = ""
    admin_username: str = "admin"
    admin_password: str = ""
    secret_key: str = field(default_factory=get_random_secret_key)

    def __post_init__(self):
        self.db_type = (self.db_type or "").strip().lower()
        if self.db_type not in DB_TYPES:
            raise ValueError(f"Unsupported database type '{self.db_type}'. Choose one of: {', '.join(DB_TYPES)}.")
        if not self.db_port:
            self.db_port = DEFAULT_DB_PORTS[self.db_type]


def database_settings(answers: SetupAnswers) -> dict:
    """Django DATABASES entry for the answers."""
    if answers.db_type == "sqlite":
        return {"ENGINE": DB_ENGINES["sqlite"], "NAME": answers.db_name or "db.sqlite3"}
    return {
        "ENGINE": DB_ENGINES[answers.db_type],
        "NAME": answers.db_name,
        "USER": answers.db_username,
        "PASSWORD": answers.db_password,
        "HOST": answers.db_host,
        "PORT": answers.db_port,
    }


def check_database(answers: SetupAnswers) -> None:
    handler = ConnectionHandler({"default": database_settings(answers)})
    try:
        handler["default"].ensure_connection()
    except (DatabaseError, ImproperlyConfigured) as exc:
        raise SetupCheckError(f"Could not connect to the {answers.db_type} database: {exc}") from exc
    finally:
        handler.close_all()


def check_redis(uri: str) -> None:
    import redis

    try:
        client = redis.Redis.from_url(uri, socket_connect_timeout=5, socket_timeout=5)
        client.ping()
    except (redis.exceptions.RedisError, ValueError) as exc:
        raise SetupCheckError(f"Could not connect to Redis at {uri}: {exc}") from exc


def _quote(value: str) -> str:
    if value == "" or any(ch.isspace() or ch in "#\"'$\\=" for ch in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def env_values(answers: SetupAnswers) -> list[tuple[str, str]]:
    values = [
        ("SECRET_KEY", answers.secret_key),
        ("DEBUG", "true" if answers.debug else "false"),
        ("ALLOWED_HOSTS", answers.allowed_hosts),
        ("PORT", answers.app_port),
        ("DB_TYPE", answers.db_type),
    ]
    if answers.db_type == "sqlite":
        values.append(("DB_NAME", answers.db_name))
    else:
        values.extend(
            [
                ("DB_HOST", answers.db_host),
                ("DB_PORT", answers.db_port),
                ("DB_USERNAME", answers.db_username),
                ("DB_PASSWORD", answers.db_password),
                ("DB_NAME", answers.db_name),
            ]
        )
    if answers.redis_uri:
        values.append(("REDIS_URI", answers.redis_uri))
    if answers.admin_email:
        values.extend(
            [
                ("ADMIN_EMAIL", answers.admin_email),
                ("ADMIN_USERNAME", answers.admin_username),
                ("ADMIN_PASSWORD", answers.admin_password),
            ]
        )
    return values


def render_env(answers: SetupAnswers) -> str:
    lines = ["# Generated by manage.py setup.\n"]
    for key, value in env_values(answers):
        lines.append(f"{key}={_quote(str(value))}\n")
    return "".join(lines)


def write_env(answers: SetupAnswers, path: Path, *, force: bool = False) -> Path:
    path = Path(path)
    if path.exists() and not force:
        raise FileExistsError(f"{path} already exists.")
    path.write_text(render_env(answers))
    try:
        path.chmod(0o600)
    except OSError as exc:
        logger.warning("Could not restrict permissions on %s: %s", path, exc)
    return path
