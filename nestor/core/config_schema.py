"""
Settings File Schemas.

One pydantic model per file in config/settings/, checked when AppConfig is
built so a typo in a YAML key fails at startup with the file name:

    application.yaml   ApplicationSchema   Jenkins URL, trigger token, timeouts,
                                           console interval, monitor schedule,
                                           discovery port/timeout
    logging.yaml       LoggingSchema       level, format, console/file handlers
    concurrency.yaml   ConcurrencySchema   semaphore sizes
"""

from pydantic import BaseModel, ConfigDict


class _StrictBase(BaseModel):
    """Unknown keys are errors."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class JenkinsSchema(_StrictBase):
    url: str
    trigger_token: str


class TimeoutsSchema(_StrictBase):
    http: float


class ConsoleSchema(_StrictBase):
    interval_seconds: float


class MonitorSchema(_StrictBase):
    schedule: str


class DiscoverySchema(_StrictBase):
    port: int
    timeout_seconds: float


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    jenkins: JenkinsSchema
    timeouts: TimeoutsSchema
    console: ConsoleSchema
    monitor: MonitorSchema
    discovery: DiscoverySchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# concurrency.yaml
# =============================================================================


class SemaphoresSchema(_StrictBase):
    build_trigger: int


class ConcurrencySchema(_StrictBase):
    semaphores: SemaphoresSchema
