"""HTTP helpers for provider asset transfers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from urllib.parse import urlparse

import httpx

from picker_gallery.ingestion.exceptions import DownloadFailure


@dataclass(slots=True)
class DownloadedAsset:
    """Raw bytes fetched from a provider asset URL."""
    url: str
    content: bytes
    content_type: str | None = None


def is_trusted_host(url: str, hosts: Iterable[str]) -> bool:
    """Return True when the URL host is one of ``hosts`` or a subdomain of one."""
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return False
    if not hostname:
        return False
    for host in hosts:
        host = host.lower().lstrip(".")
        if host and (hostname == host or hostname.endswith(f".{host}")):
            return True
    return False


async def download_asset(
    url: str,
    *,
    item_id: str | None,
    access_token: str | None,
    trusted_hosts: Iterable[str],
    timeout: float,
) -> DownloadedAsset:
    """Download an asset, sending the bearer token only to trusted provider hosts."""
    headers: dict[str, str] = {}
    if access_token and is_trusted_host(url, trusted_hosts):
        headers["Authorization"] = f"Bearer {access_token}"
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url, headers=headers)
    except httpx.InvalidURL as exc:
        raise DownloadFailure(item_id, f"Invalid URL: {url}") from exc
    except httpx.TimeoutException as exc:
        raise DownloadFailure(item_id, "Request timeout") from exc
    except httpx.HTTPError as exc:
        raise DownloadFailure(item_id, str(exc) or exc.__class__.__name__) from exc
    if not response.is_success:
        raise DownloadFailure(item_id, f"HTTP error: {response.status_code} {response.reason_phrase}")
    if not response.content:
        raise DownloadFailure(item_id, "Empty response body")
    return DownloadedAsset(url=url, content=response.content, content_type=response.headers.get("content-type"))
