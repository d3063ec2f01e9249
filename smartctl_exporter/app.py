"""Main application entry-point for smartctl-exporter."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from typing import Optional

from .adapters import CcissVolStatusLister, SmartctlReader
from .collection import CollectionOrchestrator, RescanScheduler
from .config import ExporterConfig, load_config
from .core import DiagnosticReader, Inventory, InventoryRegistry, MetricTranslator, VolumeLister
from .discovery import DeviceFilter, DeviceScanner, restrict_devices
from .health import HealthReporter
from .logging import configure_logging
from .metrics import SmartctlMetricTranslator
from .server import MetricsServer
from .version import __version__

LOGGER = logging.getLogger(__name__)


class ExporterStartupError(RuntimeError):
    """Raised when the exporter cannot begin serving metrics."""


class ExporterApp:
    """Coordinates discovery, background rescans, and the metrics endpoint.

    Startup runs one discovery pass (narrowed by any explicit device list),
    loads the result into the inventory registry, starts the rescan task when
    rescanning is enabled, and finally binds the HTTP listener. Collaborators
    can be injected for testing; by default they are built from the config.
    """

    def __init__(
        self,
        config: Optional[ExporterConfig] = None,
        *,
        reader: Optional[DiagnosticReader] = None,
        volume_lister: Optional[VolumeLister] = None,
        translator: Optional[MetricTranslator] = None,
    ) -> None:
        self._config = config or load_config()
        smartctl = self._config.smartctl

        self._reader: DiagnosticReader = reader or SmartctlReader(
            smartctl.path,
            cache_seconds=smartctl.interval_seconds,
            command_timeout=smartctl.command_timeout_seconds,
        )
        if volume_lister is None and self._config.cciss.enabled:
            volume_lister = CcissVolStatusLister(
                self._config.cciss.path,
                command_timeout=smartctl.command_timeout_seconds,
            )

        self._scanner = DeviceScanner(
            self._reader,
            device_filter=DeviceFilter(smartctl.device_exclude, smartctl.device_include),
            volume_lister=volume_lister,
        )
        self._registry = InventoryRegistry()
        self._orchestrator = CollectionOrchestrator(
            self._registry, self._reader, translator or SmartctlMetricTranslator()
        )
        self._health = HealthReporter()
        self._stop_event: Optional[asyncio.Event] = None
        self._scheduler: Optional[RescanScheduler] = None
        self._server: Optional[MetricsServer] = None

    @property
    def config(self) -> ExporterConfig:
        return self._config

    @property
    def registry(self) -> InventoryRegistry:
        return self._registry

    @property
    def orchestrator(self) -> CollectionOrchestrator:
        return self._orchestrator

    @property
    def health(self) -> HealthReporter:
        return self._health

    @property
    def scheduler(self) -> Optional[RescanScheduler]:
        return self._scheduler

    async def discover(self) -> Inventory:
        """Run the startup discovery pass and load it into the registry."""
        devices = await self._scanner.scan()
        LOGGER.info("Number of devices found: %d", len(devices))

        explicit = self._config.smartctl.devices
        if explicit:
            LOGGER.info("Devices specified: %s", ", ".join(explicit))
            devices = restrict_devices(devices, explicit)
            LOGGER.info("Devices filtered: %d", len(devices))

        await self._registry.replace(devices)
        await self._update_discovery_health(devices)
        return devices

    async def start_services(self, *, serve: bool = True) -> None:
        self._stop_event = asyncio.Event()
        await self.discover()

        self._scheduler = RescanScheduler(
            self._scanner,
            self._registry,
            interval_seconds=self._rescan_interval(),
            stop_event=self._stop_event,
            on_rescan=self._handle_rescan,
        )
        self._scheduler.start()
        await self._health.update(
            "rescan",
            True,
            "running" if self._scheduler.enabled else "disabled",
        )

        if serve:
            await self._start_server()

    async def stop_services(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

        if self._scheduler is not None:
            await self._scheduler.stop()
            self._scheduler = None

        if self._server is not None:
            await self._server.stop()
            self._server = None
            await self._health.update("metrics-endpoint", False, "shutdown")

    def request_stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self) -> None:
        """Start all services and block until a stop is requested."""
        LOGGER.info("Starting smartctl-exporter %s", __version__)
        LOGGER.info("Configuration loaded from %s", self._config.path)

        try:
            await self.start_services()
            self._install_signal_handlers()
            await self._idle_loop()
        except asyncio.CancelledError:
            LOGGER.info("smartctl-exporter received shutdown signal")
            raise
        finally:
            await self.stop_services()

    async def _idle_loop(self) -> None:
        LOGGER.info("smartctl-exporter active; awaiting shutdown signal")
        if self._stop_event is None:
            self._stop_event = asyncio.Event()
        await self._stop_event.wait()

    @classmethod
    def start(cls, config: Optional[ExporterConfig] = None) -> None:
        instance = cls(config=config)
        configure_logging(
            instance._config.logging.level,
            log_path=instance._config.logging.path,
            log_access=instance._config.logging.log_access,
        )
        try:
            asyncio.run(instance.run())
        except KeyboardInterrupt:
            LOGGER.info("smartctl-exporter received shutdown signal")

    def _rescan_interval(self) -> float:
        smartctl = self._config.smartctl
        if smartctl.rescan_enabled:
            return smartctl.rescan_seconds
        if smartctl.devices:
            LOGGER.info("Explicit devices configured; rescanning disabled")
        return 0.0

    async def _start_server(self) -> None:
        web_config = self._config.web
        server = MetricsServer(
            self._orchestrator,
            self._health,
            web_config.listen_host,
            web_config.listen_port,
            telemetry_path=web_config.telemetry_path,
        )
        try:
            await server.start()
        except OSError as exc:
            await self._health.update("metrics-endpoint", False, str(exc))
            raise ExporterStartupError(
                f"failed to listen on {web_config.listen_host}:{web_config.listen_port}: {exc}"
            ) from exc
        self._server = server
        await self._health.update("metrics-endpoint", True, None)

    async def _handle_rescan(self, devices: Inventory) -> None:
        forget = getattr(self._reader, "forget", None)
        if callable(forget):
            forget(devices)
        await self._update_discovery_health(devices)

    async def _update_discovery_health(self, devices: Inventory) -> None:
        if devices:
            await self._health.update("discovery", True, f"{len(devices)} devices")
        else:
            await self._health.update("discovery", False, "no devices found")

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGTERM, signal.SIGINT):
            with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
                loop.add_signal_handler(signum, self.request_stop)
