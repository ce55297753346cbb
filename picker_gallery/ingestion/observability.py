"""Metrics tracking and structured logging for pipeline calls."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, DefaultDict

from picker_gallery.utils.redaction import redact_secrets

logger = logging.getLogger("picker_gallery.ingestion")


@dataclass
class OperationMetrics:
    """Aggregated counters for a source operation."""
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    failure_streak: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None

    def record_success(self, latency_ms: float) -> None:
        self.succeeded += 1
        self.failure_streak = 0
        self.last_latency_ms = latency_ms
        self.last_error = None

    def record_failure(self, latency_ms: float, error: str) -> None:
        self.failed += 1
        self.failure_streak += 1
        self.last_latency_ms = latency_ms
        self.last_error = error


def _log_event(level: int, event: str, source: str, operation: str, **fields: Any) -> None:
    logger.log(level, json.dumps({"event": event, "source": source, "operation": operation, **fields}))


class PipelineMonitor:
    """Track latency, outcomes, and last errors per (source, operation).

    Sources are the external collaborators (``google_photos_picker``,
    ``asset_download``, ``cloudinary``) plus ``gallery`` for skipped items.
    """

    def __init__(self) -> None:
        self._metrics: DefaultDict[str, DefaultDict[str, OperationMetrics]] = defaultdict(
            lambda: defaultdict(OperationMetrics)
        )
        self._lock = asyncio.Lock()

    async def record_skip(
        self,
        source: str,
        operation: str,
        *,
        reason: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Count an intentionally skipped unit of work."""
        async with self._lock:
            self._metrics[source][operation].skipped += 1
        _log_event(logging.INFO, "pipeline_skip", source, operation, reason=reason, context=context or {})

    async def track(
        self,
        source: str,
        operation: str,
        func: Callable[[], Awaitable[Any]],
        *,
        context: dict[str, Any] | None = None,
    ) -> Any:
        """Await ``func`` and record its outcome; exceptions are re-raised unchanged.

        Error text is redacted before it is stored or logged.
        """
        context = context or {}
        async with self._lock:
            self._metrics[source][operation].started += 1

        start = time.monotonic()
        try:
            result = await func()
        except Exception as exc:  # noqa: BLE001
            latency_ms = (time.monotonic() - start) * 1000
            error = redact_secrets(str(exc)) or exc.__class__.__name__
            async with self._lock:
                self._metrics[source][operation].record_failure(latency_ms, error)
            _log_event(
                logging.WARNING,
                "pipeline_failure",
                source,
                operation,
                error=error,
                latency_ms=round(latency_ms, 2),
                context=context,
            )
            raise

        latency_ms = (time.monotonic() - start) * 1000
        async with self._lock:
            self._metrics[source][operation].record_success(latency_ms)
        _log_event(logging.INFO, "pipeline_success", source, operation, latency_ms=round(latency_ms, 2), context=context)
        return result

    async def snapshot(self) -> dict[str, Any]:
        """Return a serializable copy of all tracked metrics."""
        async with self._lock:
            return {
                source: {"operations": {name: asdict(metrics) for name, metrics in operations.items()}}
                for source, operations in self._metrics.items()
            }


pipeline_monitor = PipelineMonitor()
