"""Verify the stored picker OAuth token still works and carries the picker scope."""

from __future__ import annotations

import asyncio
import logging

import httpx

from picker_gallery.core.config import settings
from picker_gallery.ingestion.exceptions import PickerAuthError
from picker_gallery.ingestion.oauth import GoogleOAuthTokenProvider
from picker_gallery.utils.redaction import redact_secrets

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

logger = logging.getLogger("picker_gallery.scripts.check_picker_token")


class TokenCheckError(Exception):
    pass


async def check_token(provider: GoogleOAuthTokenProvider | None = None) -> dict:
    """Return tokeninfo for the current access token or raise TokenCheckError."""
    provider = provider or GoogleOAuthTokenProvider.from_settings()
    try:
        access_token = await provider.get_access_token()
    except PickerAuthError as exc:
        raise TokenCheckError(str(exc)) from exc
    try:
        async with httpx.AsyncClient(timeout=settings.picker_timeout_seconds) as client:
            response = await client.get(settings.google_tokeninfo_url, params={"access_token": access_token})
    except httpx.HTTPError as exc:
        raise TokenCheckError(f"Tokeninfo request failed: {exc.__class__.__name__}") from exc
    if not response.is_success:
        raise TokenCheckError(f"Tokeninfo rejected token: {response.status_code} {redact_secrets(response.text)}")
    try:
        info = response.json()
    except ValueError as exc:
        raise TokenCheckError("Tokeninfo returned a non-JSON body") from exc
    if not isinstance(info, dict):
        raise TokenCheckError("Tokeninfo returned an unexpected payload")
    scopes = str(info.get("scope") or "").split()
    if settings.picker_scope not in scopes:
        raise TokenCheckError(f"Token is missing scope {settings.picker_scope}")
    return info


def main() -> int:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)
    try:
        info = asyncio.run(check_token())
    except TokenCheckError as exc:
        logger.error("Picker token check failed: %s", exc)
        return 1
    logger.info("Picker token OK; expires in %s seconds", info.get("expires_in"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
