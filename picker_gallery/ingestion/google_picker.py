"""Google Photos Picker API client for session brokering and media listing."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx

from picker_gallery.core.config import settings
from picker_gallery.ingestion.base import BasePickerClient, MediaItemsPage, PickerSession
from picker_gallery.ingestion.exceptions import ProviderError, SessionExpired
from picker_gallery.ingestion.oauth import GoogleOAuthTokenProvider
from picker_gallery.ingestion.observability import PipelineMonitor, pipeline_monitor
from picker_gallery.utils.redaction import redact_secrets

logger = logging.getLogger("picker_gallery.ingestion.picker")

# Status codes the provider uses for unknown, malformed, or expired session ids.
SESSION_GONE_STATUSES = frozenset({400, 404, 410})


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_session(payload: dict[str, Any]) -> PickerSession:
    """Convert a provider session payload, keeping the raw body verbatim."""
    session_id = payload.get("id")
    if not session_id:
        raise ProviderError("Picker API returned a session without an id")
    polling_config = payload.get("pollingConfig")
    return PickerSession(
        session_id=str(session_id),
        picker_uri=payload.get("pickerUri"),
        media_items_set=bool(payload.get("mediaItemsSet")),
        expire_time=_parse_timestamp(payload.get("expireTime")),
        polling_config=polling_config if isinstance(polling_config, dict) else {},
        raw=payload,
    )


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class GooglePhotosPickerClient(BasePickerClient):
    """Photos Picker API connector authenticated with a stored OAuth token."""
    source_name = "google_photos_picker"

    def __init__(
        self,
        token_provider: GoogleOAuthTokenProvider,
        *,
        api_base: str | None = None,
        timeout: float | None = None,
        monitor: PipelineMonitor | None = None,
    ) -> None:
        self.token_provider = token_provider
        self.api_base = (api_base or settings.picker_api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.picker_timeout_seconds
        self.monitor = monitor or pipeline_monitor

    @classmethod
    def from_settings(cls) -> GooglePhotosPickerClient:
        return cls(GoogleOAuthTokenProvider.from_settings())

    async def get_access_token(self) -> str:
        return await self.token_provider.get_access_token()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        """Send an authenticated request and map failures onto typed errors.

        Implementation notes:
        - No retries here; callers own any retry policy.
        - ``session_id`` enables SessionExpired mapping for status reads.
        """
        token = await self.token_provider.get_access_token()
        headers = {"Authorization": f"Bearer {token}"}
        url = f"{self.api_base}{path}"

        async def _call() -> dict[str, Any]:
            try:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, headers=headers, params=params, json=json_body)
            except httpx.HTTPError as exc:
                raise ProviderError(f"Picker API unreachable: {exc.__class__.__name__}") from exc
            if response.is_success:
                payload = _response_body(response)
                return payload if isinstance(payload, dict) else {}
            body = _response_body(response)
            logger.warning(
                "Picker API %s %s failed with %s: %s",
                method,
                path,
                response.status_code,
                redact_secrets(str(body)),
            )
            if session_id and response.status_code in SESSION_GONE_STATUSES:
                raise SessionExpired(session_id, status_code=response.status_code, body=body)
            raise ProviderError("Picker API error", status_code=response.status_code, body=body)

        context = {"session_id": session_id} if session_id else {}
        return await self.monitor.track(self.source_name, operation, _call, context=context)

    async def create_session(self) -> PickerSession:
        """Open a picker session; the body is empty because no options are needed."""
        payload = await self._request("POST", "/sessions", operation="create_session", json_body={})
        session = parse_session(payload)
        logger.info("Created picker session %s", session.session_id)
        return session

    async def get_session(self, session_id: str) -> PickerSession:
        payload = await self._request(
            "GET", f"/sessions/{quote(session_id, safe='')}", operation="get_session", session_id=session_id
        )
        return parse_session(payload)

    async def list_media_items(self, session_id: str, page_token: str | None = None) -> MediaItemsPage:
        params = {"sessionId": session_id}
        if page_token:
            params["pageToken"] = page_token
        payload = await self._request("GET", "/mediaItems", operation="list_media_items", params=params)
        items = payload.get("mediaItems") or []
        return MediaItemsPage(
            items=[item for item in items if isinstance(item, dict)],
            next_page_token=payload.get("nextPageToken") or None,
        )
