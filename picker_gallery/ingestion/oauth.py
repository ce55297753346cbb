"""OAuth token handling for the Google Photos Picker API."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.auth.exceptions import TransportError as GoogleTransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from picker_gallery.core.config import settings
from picker_gallery.ingestion.exceptions import PickerAuthError
from picker_gallery.utils.redaction import redact_secrets

logger = logging.getLogger("picker_gallery.ingestion.oauth")


def _utcnow() -> datetime:
    # google-auth compares expiry as naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _expiry_from_ms(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc).replace(tzinfo=None)
    except (TypeError, ValueError, OverflowError, OSError):
        # Unreadable expiry: treat the token as already expired.
        return datetime(1970, 1, 1)


def _expiry_to_ms(expiry: datetime) -> int:
    return int(expiry.replace(tzinfo=timezone.utc).timestamp() * 1000)


class GoogleOAuthTokenProvider:
    """Serve a bearer token from the stored token file, refreshing it near expiry.

    The token file uses the layout written by the one-off consent flow:
    ``access_token``, ``refresh_token`` and ``expiry_date`` in epoch milliseconds.
    Refreshes go through google-auth ``Credentials`` and are written back to the
    same file.
    """

    def __init__(
        self,
        *,
        token_path: str | Path,
        client_id: str | None,
        client_secret: str | None,
        token_url: str,
        refresh_buffer_seconds: int = 300,
    ) -> None:
        self.token_path = Path(token_path)
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self._token: dict[str, Any] | None = None
        self._credentials: Credentials | None = None

    @classmethod
    def from_settings(cls) -> GoogleOAuthTokenProvider:
        return cls(
            token_path=settings.google_token_path,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            token_url=settings.google_token_url,
            refresh_buffer_seconds=settings.google_token_refresh_buffer_seconds,
        )

    def load_token(self) -> dict[str, Any]:
        """Read the stored token, raising when the consent flow never ran."""
        try:
            content = self.token_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise PickerAuthError(
                f"Token file {self.token_path} not found; run the picker consent flow to create it"
            ) from exc
        try:
            token = json.loads(content)
        except json.JSONDecodeError as exc:
            raise PickerAuthError(f"Token file {self.token_path} is not valid JSON") from exc
        if not isinstance(token, dict):
            raise PickerAuthError(f"Token file {self.token_path} has an unexpected layout")
        return token

    def save_token(self, token: dict[str, Any]) -> None:
        """Replace the token file atomically so a crash never truncates it."""
        directory = self.token_path.parent
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.token_path.name}.", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(token, handle, indent=2)
            os.replace(tmp_name, self.token_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def build_credentials(self, token: dict[str, Any]) -> Credentials:
        scope = token.get("scope")
        return Credentials(
            token=token.get("access_token"),
            refresh_token=token.get("refresh_token"),
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=self.token_url,
            scopes=scope.split() if isinstance(scope, str) and scope else None,
            expiry=_expiry_from_ms(token.get("expiry_date")),
        )

    def needs_refresh(self, credentials: Credentials) -> bool:
        """Return True when the token is missing or expires within the refresh buffer."""
        if not credentials.token:
            return True
        if credentials.expiry is None:
            return False
        return credentials.expiry <= _utcnow() + timedelta(seconds=self.refresh_buffer_seconds)

    async def refresh(self, credentials: Credentials) -> None:
        """Run the refresh-token grant off the event loop and persist the result."""
        if not credentials.refresh_token:
            raise PickerAuthError("Stored token has no refresh_token")
        if not self.client_id or not self.client_secret:
            raise PickerAuthError("GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET must be set to refresh tokens")
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(3),
            wait=wait_exponential_jitter(initial=1, max=8),
            retry=retry_if_exception_type(GoogleTransportError),
            reraise=True,
        ):
            with attempt:
                await asyncio.to_thread(credentials.refresh, Request())

        token = dict(self._token or {})
        token["access_token"] = credentials.token
        token["refresh_token"] = credentials.refresh_token
        if credentials.expiry is not None:
            token["expiry_date"] = _expiry_to_ms(credentials.expiry)
        self.save_token(token)
        self._token = token
        logger.info("Refreshed picker access token; expires at %s", token.get("expiry_date"))

    async def get_access_token(self) -> str:
        """Return a bearer token, refreshing first when it is about to expire."""
        if self._credentials is None:
            self._token = self.load_token()
            self._credentials = self.build_credentials(self._token)
        credentials = self._credentials
        if self.needs_refresh(credentials):
            try:
                await self.refresh(credentials)
            except (PickerAuthError, GoogleAuthError) as exc:
                logger.warning("Token refresh failed, using existing token: %s", redact_secrets(str(exc)))
        if not credentials.token:
            raise PickerAuthError("No access token available for the picker API")
        return credentials.token
