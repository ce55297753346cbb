from __future__ import annotations

import time
from collections import deque

import pytest

from picker_gallery.ingestion.exceptions import PollingTimeout, SessionExpired
from picker_gallery.services import picker_service
from picker_gallery.tests.utils import FakePickerClient, picker_items, picker_media_item


@pytest.mark.asyncio
async def test_poll_returns_as_soon_as_selection_is_set():
    picker = FakePickerClient(statuses=deque([False, False, True]))

    session = await picker_service.poll_until_selected(picker, "s1", interval_seconds=0, max_attempts=10)

    assert session.media_items_set is True
    assert picker.status_calls == 3


@pytest.mark.asyncio
async def test_poll_times_out_within_budget():
    picker = FakePickerClient(media_items_set=False)

    start = time.monotonic()
    with pytest.raises(PollingTimeout) as excinfo:
        await picker_service.poll_until_selected(picker, "s1", interval_seconds=0.01, max_attempts=5)
    elapsed = time.monotonic() - start

    assert excinfo.value.attempts == 5
    assert picker.status_calls == 5
    assert elapsed < 1.0


@pytest.mark.asyncio
async def test_poll_stops_immediately_when_session_expires():
    picker = FakePickerClient(statuses=deque([False, "expired"]), media_items_set=False)

    with pytest.raises(SessionExpired):
        await picker_service.poll_until_selected(picker, "gone", interval_seconds=0, max_attempts=60)

    assert picker.status_calls == 2


@pytest.mark.asyncio
async def test_get_all_media_items_follows_pagination_in_order():
    picker = FakePickerClient(
        pages=[
            picker_items("a", "b"),
            picker_items("c"),
            [picker_media_item("d", base_url="https://lh3.googleusercontent.com/pp/d")],
        ]
    )

    descriptors = await picker_service.get_all_media_items(picker, "s1")

    assert [d.id for d in descriptors] == ["a", "b", "c", "d"]
    assert picker.list_calls == [None, "1", "2"]
    assert descriptors[0].width == 1024
    assert descriptors[0].download_url == "https://lh3.googleusercontent.com/pp/a"


@pytest.mark.asyncio
async def test_get_all_media_items_handles_empty_selection():
    picker = FakePickerClient(pages=[])

    assert await picker_service.get_all_media_items(picker, "s1") == []
    assert picker.list_calls == [None]
