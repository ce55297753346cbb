"""Picker API client tests for session parsing and error mapping."""

from __future__ import annotations

from collections import deque
from typing import Any

import httpx
import pytest

from picker_gallery.ingestion.exceptions import ProviderError, SessionExpired
from picker_gallery.ingestion.google_picker import GooglePhotosPickerClient
from picker_gallery.ingestion.observability import PipelineMonitor

API_BASE = "https://photospicker.test/v1"


class StaticTokenProvider:
    async def get_access_token(self) -> str:
        return "picker-token"


def _build_response(status: int = 200, json_data: Any | None = None) -> httpx.Response:
    return httpx.Response(status_code=status, json=json_data if json_data is not None else {}, request=httpx.Request("GET", API_BASE))


def _configure_client(
    monkeypatch: pytest.MonkeyPatch, responses: deque[httpx.Response]
) -> tuple[GooglePhotosPickerClient, list[dict[str, Any]], PipelineMonitor]:
    call_log: list[dict[str, Any]] = []

    class DummyAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            pass

        async def __aenter__(self) -> DummyAsyncClient:
            return self

        async def __aexit__(self, *args: Any) -> bool:
            return False

        async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
            call_log.append({"method": method, "url": url, **kwargs})
            if not responses:
                raise RuntimeError("No stub responses configured")
            return responses.popleft()

    monkeypatch.setattr("picker_gallery.ingestion.google_picker.httpx.AsyncClient", DummyAsyncClient)
    monitor = PipelineMonitor()
    client = GooglePhotosPickerClient(StaticTokenProvider(), api_base=API_BASE, timeout=5, monitor=monitor)
    return client, call_log, monitor


@pytest.mark.asyncio
async def test_create_session_returns_provider_fields(monkeypatch):
    responses = deque(
        [
            _build_response(
                json_data={
                    "id": "sess-1",
                    "pickerUri": "https://photos.google.com/picker/sess-1",
                    "pollingConfig": {"pollInterval": "5s", "timeoutIn": "1800s"},
                    "expireTime": "2026-10-19T12:00:00Z",
                    "mediaItemsSet": False,
                }
            )
        ]
    )
    client, call_log, _ = _configure_client(monkeypatch, responses)

    session = await client.create_session()

    assert session.session_id == "sess-1"
    assert session.picker_uri == "https://photos.google.com/picker/sess-1"
    assert session.media_items_set is False
    assert session.expire_time is not None and session.expire_time.year == 2026
    assert session.polling_config["pollInterval"] == "5s"
    assert call_log[0]["method"] == "POST"
    assert call_log[0]["url"] == f"{API_BASE}/sessions"
    assert call_log[0]["headers"] == {"Authorization": "Bearer picker-token"}


@pytest.mark.asyncio
async def test_get_session_not_found_raises_session_expired(monkeypatch):
    responses = deque([_build_response(404, {"error": {"code": 404, "status": "NOT_FOUND"}})])
    client, call_log, monitor = _configure_client(monkeypatch, responses)

    with pytest.raises(SessionExpired) as excinfo:
        await client.get_session("gone")

    assert excinfo.value.status_code == 404
    assert call_log[0]["url"] == f"{API_BASE}/sessions/gone"
    snapshot = await monitor.snapshot()
    assert snapshot["google_photos_picker"]["operations"]["get_session"]["failed"] == 1


@pytest.mark.asyncio
async def test_create_session_failure_is_provider_error_without_retry(monkeypatch):
    responses = deque([_build_response(503, {"error": {"message": "backend unavailable"}}), _build_response()])
    client, call_log, _ = _configure_client(monkeypatch, responses)

    with pytest.raises(ProviderError) as excinfo:
        await client.create_session()

    assert not isinstance(excinfo.value, SessionExpired)
    assert excinfo.value.status_code == 503
    assert excinfo.value.body == {"error": {"message": "backend unavailable"}}
    assert len(call_log) == 1


@pytest.mark.asyncio
async def test_transport_errors_surface_as_provider_error(monkeypatch):
    client, _, _ = _configure_client(monkeypatch, deque())

    async def _boom(*args: Any, **kwargs: Any) -> httpx.Response:
        raise httpx.ConnectError("refused")

    monkeypatch.setattr("picker_gallery.ingestion.google_picker.httpx.AsyncClient.request", _boom)

    with pytest.raises(ProviderError) as excinfo:
        await client.create_session()
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_list_media_items_passes_session_and_page_token(monkeypatch):
    responses = deque(
        [
            _build_response(json_data={"mediaItems": [{"id": "a"}, {"id": "b"}], "nextPageToken": "p2"}),
            _build_response(json_data={"mediaItems": [{"id": "c"}]}),
        ]
    )
    client, call_log, _ = _configure_client(monkeypatch, responses)

    first = await client.list_media_items("sess-1")
    second = await client.list_media_items("sess-1", first.next_page_token)

    assert [item["id"] for item in first.items] == ["a", "b"]
    assert first.next_page_token == "p2"
    assert second.next_page_token is None
    assert call_log[0]["params"] == {"sessionId": "sess-1"}
    assert call_log[1]["params"] == {"sessionId": "sess-1", "pageToken": "p2"}
