"""Configuration loader for smartctl-exporter."""

from __future__ import annotations

import logging
import re
from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from . import constants

LOGGER = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS: float = 60.0
DEFAULT_RESCAN_INTERVAL_SECONDS: float = 600.0

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


class ConfigurationError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


@dataclass(slots=True)
class SmartctlConfig:
    path: str = constants.DEFAULT_SMARTCTL_PATH
    interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS  # How long a device reading is reused
    rescan_seconds: float = DEFAULT_RESCAN_INTERVAL_SECONDS
    devices: List[str] = field(default_factory=list)
    device_exclude: str = ""
    device_include: str = ""
    command_timeout_seconds: Optional[float] = None  # None leaves smartctl calls unbounded

    @property
    def rescan_enabled(self) -> bool:
        # An explicit device list pins the inventory for the process lifetime.
        if self.devices:
            return False
        return self.rescan_seconds >= constants.MIN_RESCAN_INTERVAL_SECONDS


@dataclass(slots=True)
class CcissConfig:
    path: str = constants.DEFAULT_CCISS_VOL_STATUS_PATH
    enabled: bool = False


@dataclass(slots=True)
class WebConfig:
    listen_host: str = constants.DEFAULT_LISTEN_HOST
    listen_port: int = constants.DEFAULT_LISTEN_PORT
    telemetry_path: str = constants.DEFAULT_TELEMETRY_PATH


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_access: bool = False


@dataclass(slots=True)
class ExporterConfig:
    smartctl: SmartctlConfig
    cciss: CcissConfig
    web: WebConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def parse_duration(value: str) -> float:
    """Parse a Go-style duration (``90s``, ``10m``, ``1h30m``, ``500ms``) into seconds.

    Bare numbers are interpreted as seconds.
    """

    text = value.strip().lower()
    if not text:
        raise ConfigurationError("empty duration")

    try:
        return float(text)
    except ValueError:
        pass

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ConfigurationError(f"invalid duration: {value!r}")
    return total


def _parse_list(value: str, *, default: Iterable[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_duration(
    parser: ConfigParser, section: str, option: str, *, fallback: float
) -> float:
    raw_value = parser.get(section, option, fallback="")
    if not raw_value.strip():
        return fallback
    try:
        return parse_duration(raw_value)
    except ConfigurationError:
        LOGGER.warning(
            "Invalid duration %r for [%s] %s; using %ss", raw_value, section, option, fallback
        )
        return fallback


def load_config(path: Optional[Path] = None) -> ExporterConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "smartctl": {
                "path": constants.DEFAULT_SMARTCTL_PATH,
                "interval": "60s",
                "rescan": "10m",
                "devices": "",
                "device_exclude": "",
                "device_include": "",
                "command_timeout": "0",
            },
            "ccissvolstatus": {
                "path": constants.DEFAULT_CCISS_VOL_STATUS_PATH,
                "enabled": "false",
            },
            "web": {
                "listen_host": constants.DEFAULT_LISTEN_HOST,
                "listen_port": str(constants.DEFAULT_LISTEN_PORT),
                "telemetry_path": constants.DEFAULT_TELEMETRY_PATH,
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_access": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    command_timeout = _get_duration(
        parser, "smartctl", "command_timeout", fallback=0.0
    )

    smartctl = SmartctlConfig(
        path=parser.get("smartctl", "path"),
        interval_seconds=max(
            0.0,
            _get_duration(
                parser, "smartctl", "interval", fallback=DEFAULT_POLL_INTERVAL_SECONDS
            ),
        ),
        rescan_seconds=_get_duration(
            parser, "smartctl", "rescan", fallback=DEFAULT_RESCAN_INTERVAL_SECONDS
        ),
        devices=_parse_list(parser.get("smartctl", "devices", fallback=""), default=()),
        device_exclude=parser.get("smartctl", "device_exclude", fallback="").strip(),
        device_include=parser.get("smartctl", "device_include", fallback="").strip(),
        command_timeout_seconds=command_timeout if command_timeout > 0 else None,
    )

    cciss = CcissConfig(
        path=parser.get("ccissvolstatus", "path"),
        enabled=parser.getboolean("ccissvolstatus", "enabled", fallback=False),
    )

    telemetry_path = parser.get(
        "web", "telemetry_path", fallback=constants.DEFAULT_TELEMETRY_PATH
    ).strip()
    if not telemetry_path.startswith("/"):
        telemetry_path = f"/{telemetry_path}"

    web = WebConfig(
        listen_host=parser.get("web", "listen_host", fallback=constants.DEFAULT_LISTEN_HOST),
        listen_port=parser.getint(
            "web", "listen_port", fallback=constants.DEFAULT_LISTEN_PORT
        ),
        telemetry_path=telemetry_path,
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_access=parser.getboolean("logging", "log_access", fallback=False),
    )

    return ExporterConfig(
        smartctl=smartctl,
        cciss=cciss,
        web=web,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )
