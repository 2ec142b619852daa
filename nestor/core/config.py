"""
Configuration.

Two sources, both optional for library users:

    config/settings/*.yaml   application.yaml, logging.yaml, concurrency.yaml;
                             validated against nestor.core.config_schema
    config/.env / env vars   JENKINS_URL, read with pydantic-settings

Both are located through the ``.project_root`` marker, searched from the
working directory upwards. The Jenkins client classes never read
configuration; the CLI resolves it here and passes explicit values in.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from nestor.core.config_schema import ApplicationSchema, ConcurrencySchema, LoggingSchema

PROJECT_MARKER = ".project_root"
SETTINGS_DIR = Path("config") / "settings"
ENV_FILE = Path("config") / ".env"


def find_project_root() -> Path:
    """
    Nearest directory at or above the working directory holding the marker.

    Raises:
        RuntimeError: No ``.project_root`` marker was found
    """
    cwd = Path.cwd()
    for candidate in (cwd, *cwd.parents):
        if (candidate / PROJECT_MARKER).exists():
            return candidate
    raise RuntimeError(f"Project root not found. Ensure {PROJECT_MARKER} file exists.")


def load_yaml_config(filename: str) -> dict[str, Any]:
    """
    Raw contents of ``config/settings/<filename>``; an empty file gives {}.

    Raises:
        RuntimeError: No project root
        FileNotFoundError: The project has no such settings file
    """
    path = find_project_root() / SETTINGS_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Overrides from config/.env or the process environment."""

    jenkins_url: str | None = None

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _validated(schema: type[BaseModel], filename: str) -> Any:
    try:
        return schema(**load_yaml_config(filename))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """
    All settings files, validated when constructed.

    A missing key, a wrong type or an unknown key fails here with the file
    name in the message.
    """

    def __init__(self) -> None:
        self._application: ApplicationSchema = _validated(ApplicationSchema, "application.yaml")
        self._logging: LoggingSchema = _validated(LoggingSchema, "logging.yaml")
        self._concurrency: ConcurrencySchema = _validated(ConcurrencySchema, "concurrency.yaml")

    @property
    def application(self) -> ApplicationSchema:
        return self._application

    @property
    def logging(self) -> LoggingSchema:
        return self._logging

    @property
    def concurrency(self) -> ConcurrencySchema:
        return self._concurrency


@lru_cache
def get_settings() -> Settings:
    """Environment overrides, plus config/.env when inside a project."""
    try:
        root = find_project_root()
    except RuntimeError:
        return Settings()
    return Settings(_env_file=str(root / ENV_FILE))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_jenkins_url() -> str:
    """JENKINS_URL if set, else ``jenkins.url`` from application.yaml; no trailing slash."""
    url = get_settings().jenkins_url or get_app_config().application.jenkins.url
    return url.rstrip("/")
