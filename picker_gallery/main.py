"""FastAPI application entrypoint and health reporting.

Invariants:
- Pipeline telemetry is only exposed to admins or allowlisted hosts.
"""

import ipaddress
import logging
from typing import Any

from fastapi import Depends, FastAPI, Request

from picker_gallery.api.deps import get_optional_admin
from picker_gallery.api.router import api_router
from picker_gallery.core.config import settings
from picker_gallery.db.session import init_models
from picker_gallery.ingestion.observability import pipeline_monitor

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
REPEATED_FAILURE_THRESHOLD = 3

logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

app = FastAPI(title=settings.app_name)
app.include_router(api_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def _create_tables() -> None:
    if settings.auto_create_tables:
        await init_models()


def _operation_issues(source: str, operation: str, metrics: dict[str, Any]) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    if metrics.get("last_error"):
        issues.append({"source": source, "operation": operation, "reason": "last_error", "error": metrics["last_error"]})
    streak = int(metrics.get("failure_streak") or 0)
    if streak >= REPEATED_FAILURE_THRESHOLD:
        issues.append({"source": source, "operation": operation, "reason": "repeated_failures", "failed": streak})
    return issues


def _summarize_pipeline(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Condense monitor state into per-source health.

    A source is degraded while any of its operations still carries a last
    error or has failed ``REPEATED_FAILURE_THRESHOLD`` times in a row.
    """
    sources: dict[str, Any] = {}
    all_issues: list[dict[str, Any]] = []
    for source, payload in snapshot.items():
        operations = payload.get("operations", {})
        source_issues = [
            issue
            for operation, metrics in operations.items()
            for issue in _operation_issues(source, operation, metrics)
        ]
        errors = [metrics["last_error"] for metrics in operations.values() if metrics.get("last_error")]
        sources[source] = {
            "state": "degraded" if source_issues else "ok",
            "operations": operations,
            "failure_total": sum(int(metrics.get("failed") or 0) for metrics in operations.values()),
            "last_error": errors[-1] if errors else None,
        }
        all_issues.extend(source_issues)
    return {"sources": sources, "issues": all_issues}


def _host_matches(entry: str, host: str) -> bool:
    try:
        return ipaddress.ip_address(host) in ipaddress.ip_network(entry, strict=False)
    except ValueError:
        return entry.casefold() == host.casefold()


def _is_allowlisted(request: Request) -> bool:
    """Match the client address and Host header against HEALTH_ALLOWLIST."""
    hosts = []
    if request.client and request.client.host:
        hosts.append(request.client.host)
    if request.headers.get("host"):
        hosts.append(request.headers["host"].split(":")[0])
    return any(
        _host_matches(entry, host) for entry in settings.health_allowlist if entry for host in hosts
    )


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health(request: Request, admin: str | None = Depends(get_optional_admin)) -> dict[str, Any]:
    """Report liveness; admins and allowlisted hosts also get pipeline telemetry."""
    if not admin and not _is_allowlisted(request):
        return {"status": "ok"}

    telemetry = _summarize_pipeline(await pipeline_monitor.snapshot())
    return {"status": "degraded" if telemetry["issues"] else "ok", "pipeline": telemetry}
