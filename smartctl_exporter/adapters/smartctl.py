"""smartctl subprocess reader.

Runs ``smartctl --json`` for device scans and per-device reads. Per-device
results are cached for ``cache_seconds`` so that scrapes arriving faster than
the configured poll interval reuse the previous answer instead of waking the
disks again.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.models import Device

LOGGER = logging.getLogger(__name__)

# smartctl exit status bits 0 and 1: command line did not parse, device open failed.
_FATAL_EXIT_MASK = 0b11

_READ_ARGS: Tuple[str, ...] = (
    "--json",
    "--info",
    "--health",
    "--attributes",
    "--tolerance=verypermissive",
    "--nocheck=standby",
    "--format=brief",
    "--log=error",
)


class SmartctlError(RuntimeError):
    """Raised when a diagnostic subprocess cannot be run."""


@dataclass(slots=True)
class CommandResult:
    returncode: int
    stdout: bytes
    stderr: bytes


@dataclass(slots=True)
class _CacheEntry:
    result: Optional[Mapping[str, Any]]
    fetched_at: float


async def run_command(
    argv: Sequence[str], *, timeout: Optional[float] = None
) -> CommandResult:
    """Run ``argv`` and capture its output.

    Raises:
        SmartctlError: If the binary cannot be spawned or the timeout expires.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise SmartctlError(f"failed to run {argv[0]}: {exc}") from exc

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise SmartctlError(f"{argv[0]} timed out after {timeout}s") from exc

    return CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout,
        stderr=stderr,
    )


class SmartctlReader:
    """Diagnostic reader backed by the smartctl binary."""

    def __init__(
        self,
        path: str,
        *,
        cache_seconds: float = 60.0,
        command_timeout: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
        runner: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._path = path
        self._cache_seconds = max(cache_seconds, 0.0)
        self._command_timeout = command_timeout
        self._clock = clock or time.monotonic
        self._runner = runner or run_command
        self._cache: Dict[str, _CacheEntry] = {}
        self._version: Optional[Dict[str, str]] = None

    @property
    def path(self) -> str:
        return self._path

    async def list_devices(self, *args: str) -> List[Dict[str, Any]]:
        argv = [self._path, "--json", "--scan-open", *args]
        try:
            document = await self._run_json(argv)
        except SmartctlError as exc:
            LOGGER.warning("Device scan %s failed: %s", " ".join(args) or "(default)", exc)
            return []

        devices = document.get("devices")
        if not isinstance(devices, list):
            LOGGER.warning(
                "Device scan %s returned no device list", " ".join(args) or "(default)"
            )
            return []
        return [entry for entry in devices if isinstance(entry, dict)]

    async def read_device(self, device: Device) -> Optional[Mapping[str, Any]]:
        now = self._clock()
        cached = self._cache.get(device.canonical_name)
        if cached is not None and now - cached.fetched_at < self._cache_seconds:
            return cached.result

        result = await self._read_uncached(device)
        self._cache[device.canonical_name] = _CacheEntry(result=result, fetched_at=now)
        return result

    def version_info(self) -> Optional[Mapping[str, str]]:
        return self._version

    def forget(self, keep: Sequence[Device]) -> None:
        """Drop cached results for devices no longer in the inventory."""
        names = {device.canonical_name for device in keep}
        for name in list(self._cache):
            if name not in names:
                del self._cache[name]

    async def _read_uncached(self, device: Device) -> Optional[Mapping[str, Any]]:
        argv = [self._path, *_READ_ARGS, *device.smartctl_args()]
        try:
            document = await self._run_json(argv)
        except SmartctlError as exc:
            LOGGER.warning("Reading %s failed: %s", device.canonical_name, exc)
            return None

        meta = document.get("smartctl")
        if not isinstance(meta, Mapping):
            meta = {}
        exit_status = meta.get("exit_status", 0)
        if isinstance(exit_status, int) and exit_status & _FATAL_EXIT_MASK:
            messages = [
                str(item.get("string"))
                for item in meta.get("messages") or []
                if isinstance(item, dict) and item.get("string")
            ]
            LOGGER.warning(
                "smartctl could not read %s (exit status %s): %s",
                device.canonical_name,
                exit_status,
                "; ".join(messages) or "no details",
            )
            return None
        return document

    async def _run_json(self, argv: Sequence[str]) -> Dict[str, Any]:
        LOGGER.debug("Running %s", " ".join(argv))
        result = await self._runner(argv, timeout=self._command_timeout)
        try:
            document = json.loads(result.stdout.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as exc:
            raise SmartctlError(
                f"unparsable output (exit status {result.returncode}): {exc}"
            ) from exc
        if not isinstance(document, dict):
            raise SmartctlError("unexpected output: top level is not an object")

        self._remember_version(document)
        return document

    def _remember_version(self, document: Mapping[str, Any]) -> None:
        smartctl = document.get("smartctl")
        if not isinstance(smartctl, Mapping):
            return
        version = smartctl.get("version")
        if not isinstance(version, list) or not version:
            return

        format_version = document.get("json_format_version") or []
        self._version = {
            "version": ".".join(str(part) for part in version),
            "svn_revision": str(smartctl.get("svn_revision", "")),
            "build_info": str(smartctl.get("build_info", "")),
            "json_format_version": ".".join(str(part) for part in format_version),
        }
