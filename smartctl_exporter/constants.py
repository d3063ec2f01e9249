"""Constants used across the smartctl-exporter package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "smartctl-exporter"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path("/etc") / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_SMARTCTL_PATH = "/usr/sbin/smartctl"
DEFAULT_CCISS_VOL_STATUS_PATH = "/usr/bin/cciss_vol_status"

DEFAULT_LISTEN_HOST = "0.0.0.0"
DEFAULT_LISTEN_PORT = 9633
DEFAULT_TELEMETRY_PATH = "/metrics"

# Rescanning only runs when the interval is at least this long.
MIN_RESCAN_INTERVAL_SECONDS = 1.0
