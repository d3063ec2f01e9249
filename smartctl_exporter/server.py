"""HTTP surface: Prometheus exposition, health, and a landing page."""

from __future__ import annotations

import contextlib
import html
import logging
from typing import Optional

from aiohttp import web
from prometheus_client.exposition import CONTENT_TYPE_LATEST

from .collection.orchestrator import CollectionOrchestrator
from .health import HealthReporter
from .metrics.samples import SampleBuffer
from .version import __version__

LOGGER = logging.getLogger(__name__)

_LANDING_PAGE = """<html>
<head><title>smartctl_exporter</title></head>
<body>
<h1>smartctl_exporter</h1>
<p>Prometheus Exporter for S.M.A.R.T. devices (version {version})</p>
<ul><li><a href="{path}">Metrics</a></li><li><a href="/healthz">Health</a></li></ul>
</body>
</html>
"""


class MetricsServer:
    """aiohttp server exposing one collection pass per scrape."""

    def __init__(
        self,
        orchestrator: CollectionOrchestrator,
        reporter: HealthReporter,
        host: str,
        port: int,
        *,
        telemetry_path: str = "/metrics",
    ) -> None:
        self._orchestrator = orchestrator
        self._reporter = reporter
        self._host = host
        self._port = port
        self._telemetry_path = telemetry_path
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get(self._telemetry_path, self._handle_metrics)
        app.router.add_get("/healthz", self._handle_health)
        if self._telemetry_path not in ("", "/"):
            app.router.add_get("/", self._handle_landing)
        return app

    async def start(self) -> None:
        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        try:
            await self._site.start()
        except OSError:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            raise
        LOGGER.info(
            "Metrics endpoint listening on http://%s:%s%s",
            self._host,
            self._port,
            self._telemetry_path,
        )

    async def stop(self) -> None:
        with contextlib.suppress(Exception):
            if self._site is not None:
                await self._site.stop()
        if self._runner is not None:
            await self._runner.cleanup()
        self._site = None
        self._runner = None

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        buffer = SampleBuffer()
        collected = await self._orchestrator.collect(buffer)
        LOGGER.debug("Scrape collected %d devices, %d samples", collected, len(buffer))
        return web.Response(
            body=buffer.render(),
            headers={"Content-Type": CONTENT_TYPE_LATEST},
        )

    async def _handle_health(self, request: web.Request) -> web.Response:
        snapshot = await self._reporter.snapshot()
        status = 200 if snapshot["status"] == "ok" else 503
        return web.json_response(snapshot, status=status)

    async def _handle_landing(self, request: web.Request) -> web.Response:
        body = _LANDING_PAGE.format(
            version=html.escape(__version__), path=html.escape(self._telemetry_path)
        )
        return web.Response(text=body, content_type="text/html")
