"""Server configuration — pydantic models plus a YAML loader.

A config file looks like::

    host: 0.0.0.0
    port: ${PORT}
    ping_interval: 30
    telemetry:
      enabled: true
      otlp_endpoint: http://collector:4317

Environment references (``${VAR}`` / ``$VAR``) are expanded before parsing.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcpcalc.protocols.mcp.dispatcher import PROTOCOL_VERSION

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

DEFAULT_PORT = 3000


class ConfigError(Exception):
    """Raised when a config file cannot be read, parsed or validated."""


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerConfig(BaseModel):
    """Everything needed to build and run the HTTP application."""

    host: str = "127.0.0.1"
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    ping_interval: float = Field(default=30.0, gt=0)
    max_pending_frames: int = Field(default=1024, gt=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: LogLevel = "INFO"
    server_name: str = "calculator-server"
    server_version: str = "1.0.0"
    protocol_version: str = PROTOCOL_VERSION
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ServerConfig:
        """Defaults overridden by ``HOST``, ``PORT`` and ``LOG_LEVEL``."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        if env.get("HOST"):
            data["host"] = env["HOST"]
        if env.get("PORT"):
            data["port"] = env["PORT"]
        if env.get("LOG_LEVEL"):
            data["log_level"] = env["LOG_LEVEL"].upper()
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


class ConfigLoader:
    """Load and validate a YAML config file into a :class:`ServerConfig`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ServerConfig:
        """Read YAML, interpolate env vars, and validate.

        Raises:
            ConfigError: On read errors, YAML parse errors or schema failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config YAML must be a mapping")

        try:
            return ServerConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
