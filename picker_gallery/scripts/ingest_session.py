"""Operator script: open a picker session, wait for a selection, ingest it."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import asdict

from picker_gallery.core.config import settings
from picker_gallery.db.session import async_session, init_models
from picker_gallery.ingestion import build_content_store, build_picker_client
from picker_gallery.ingestion.base import BaseContentStore, BasePickerClient
from picker_gallery.ingestion.exceptions import PickerError
from picker_gallery.services import ingestion_service, picker_service

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

logger = logging.getLogger("picker_gallery.scripts.ingest_session")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--session-id", help="Ingest an existing session instead of opening a new one")
    parser.add_argument("--replace", action="store_true", default=settings.gallery_replace_mode)
    parser.add_argument("--interval", type=float, default=settings.picker_poll_interval_seconds)
    parser.add_argument("--max-attempts", type=int, default=settings.picker_poll_max_attempts)
    return parser.parse_args(argv)


async def run(
    args: argparse.Namespace,
    *,
    picker: BasePickerClient | None = None,
    content_store: BaseContentStore | None = None,
) -> ingestion_service.IngestionResult:
    """Drive one full session: broker, poll, fetch, ingest."""
    picker = picker or build_picker_client()
    content_store = content_store or build_content_store()
    session_id = args.session_id
    if not session_id:
        picker_session = await picker.create_session()
        session_id = picker_session.session_id
        print(f"Open this URL to choose photos: {picker_session.picker_uri}")

    await picker_service.poll_until_selected(
        picker, session_id, interval_seconds=args.interval, max_attempts=args.max_attempts
    )
    await init_models()
    async with async_session() as session:
        return await ingestion_service.ingest_session(
            session,
            picker=picker,
            content_store=content_store,
            session_id=session_id,
            replace_mode=args.replace,
        )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for operator-triggered ingestion."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)
    args = _parse_args(argv)
    try:
        result = asyncio.run(run(args))
    except PickerError as exc:
        logger.error("Ingestion aborted: %s", exc)
        return 1
    summary = {"success": result.success, **asdict(result)}
    print(json.dumps(summary, indent=2))
    return 0 if result.success else 2


if __name__ == "__main__":
    raise SystemExit(main())
