"""Command-line interface for smartctl-exporter."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from . import constants
from .app import ExporterApp, ExporterStartupError
from .config import ConfigurationError, ExporterConfig, load_config, parse_duration
from .discovery import DeviceFilterError
from .logging import configure_logging

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartctl-exporter",
        description="Prometheus exporter for S.M.A.R.T. devices",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=constants.DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {constants.DEFAULT_CONFIG_PATH})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    start_parser = subparsers.add_parser("start", help="Start the exporter")
    start_parser.add_argument(
        "--device",
        action="append",
        default=[],
        help="Device to monitor (repeatable); disables rescanning",
    )
    start_parser.add_argument(
        "--rescan",
        help="Interval between rescans for new/disappeared devices, e.g. 10m; below 1s disables rescanning",
    )
    start_parser.add_argument("--log-level", help="Override the configured log level")

    scan_parser = subparsers.add_parser(
        "scan", help="Run device discovery once, print the devices and exit"
    )
    scan_parser.add_argument("--log-level", help="Override the configured log level")

    subparsers.add_parser(
        "show-config", help="Print the resolved configuration and exit"
    )

    return parser


def apply_overrides(config: ExporterConfig, args: argparse.Namespace) -> None:
    devices = getattr(args, "device", None)
    if devices:
        config.smartctl.devices = [*config.smartctl.devices, *devices]
        config.raw.set("smartctl", "devices", ",".join(config.smartctl.devices))

    rescan = getattr(args, "rescan", None)
    if rescan:
        config.smartctl.rescan_seconds = parse_duration(rescan)
        config.raw.set("smartctl", "rescan", rescan)

    log_level = getattr(args, "log_level", None)
    if log_level:
        config.logging.level = log_level
        config.raw.set("logging", "level", log_level)


async def _scan(config: ExporterConfig) -> int:
    app = ExporterApp(config)
    devices = await app.discover()
    for device in devices:
        print(f"{device.canonical_name}\t{device.path}\t{device.device_type or '-'}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    try:
        apply_overrides(config, args)
    except ConfigurationError as exc:
        parser.error(str(exc))

    if args.command == "start":
        try:
            ExporterApp.start(config)
        except (ExporterStartupError, DeviceFilterError) as exc:
            LOGGER.error("Startup failed: %s", exc)
            return 1
        return 0

    if args.command == "scan":
        configure_logging(config.logging.level, log_path=config.logging.path)
        try:
            return asyncio.run(_scan(config))
        except DeviceFilterError as exc:
            LOGGER.error("Scan failed: %s", exc)
            return 1

    if args.command == "show-config":
        print(f"Configuration loaded from {config.path!s}\n")
        for section in config.raw.sections():
            print(f"[{section}]")
            for key, value in config.raw[section].items():
                print(f"{key} = {value}")
            print()
        return 0

    LOGGER.error("Unknown command: %s", args.command)
    return 1


if __name__ == "__main__":
    sys.exit(main())
