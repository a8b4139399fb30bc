from __future__ import annotations

"""Service health and request accounting."""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable

import psutil

from nlweb_agent.app.settings import Settings
from nlweb_agent.index.inmemory import ContentIndex

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"
_DEGRADED_CPU_LOAD = 98.0


class HealthService:
    """Aggregate health for the LLM credential, the index and the host."""

    def __init__(self, settings: Settings, index_provider: Callable[[], ContentIndex]) -> None:
        self._settings = settings
        self._index_provider = index_provider
        self._started = time.monotonic()
        self._lock = threading.Lock()
        self._requests = 0
        self._errors = 0

    def record_request(self, success: bool) -> None:
        with self._lock:
            self._requests += 1
            if not success:
                self._errors += 1

    def metrics(self) -> dict[str, float | int]:
        with self._lock:
            requests, errors = self._requests, self._errors
        error_rate = (errors / requests) * 100 if requests else 0.0
        return {"requests": requests, "errors": errors, "error_rate": round(error_rate, 2)}

    def index_status(self) -> dict[str, Any]:
        """Side-effect free index status."""
        return {
            "status": HEALTHY,
            "indexed_document_count": self._index_provider().count,
            "timestamp": _now(),
        }

    def status(self) -> dict[str, Any]:
        cpu = _cpu_usage()
        memory = _memory_usage()
        services = {
            "openai": "up" if self._settings.openai_key_configured else "down",
            "nlweb": "up" if self._index_provider().health().get("ok") else "down",
        }
        status = HEALTHY
        if cpu["load"] is not None and cpu["load"] > _DEGRADED_CPU_LOAD:
            status = DEGRADED
        if "down" in services.values():
            status = UNHEALTHY
        payload = {
            "status": status,
            "timestamp": _now(),
            "uptime_ms": int((time.monotonic() - self._started) * 1000),
            "indexed_document_count": self._index_provider().count,
            "services": services,
            "memory": memory,
            "cpu": cpu,
            "metrics": self.metrics(),
            "version": self._settings.version,
            "environment": self._settings.app_env,
        }
        logger.info(
            "health_check",
            extra={
                "status": status,
                "cpu_load": cpu["load"],
                "memory_usage": memory["percentage"],
            },
        )
        return payload


def _memory_usage() -> dict[str, float | int]:
    """Host memory in MB; used excludes reclaimable cache."""
    memory = psutil.virtual_memory()
    used = memory.total - memory.available
    return {
        "used": round(used / 1024 / 1024),
        "total": round(memory.total / 1024 / 1024),
        "percentage": round(used / memory.total * 100, 2) if memory.total else 0.0,
    }


def _cpu_usage() -> dict[str, float | int | None]:
    """One-minute load average as a percentage of logical cores."""
    cores = psutil.cpu_count() or 1
    try:
        load_average = psutil.getloadavg()[0]
    except OSError:
        return {"load": None, "cores": cores}
    return {"load": round(load_average / cores * 100, 2), "cores": cores}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
