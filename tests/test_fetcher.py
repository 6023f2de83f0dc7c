from datetime import date

import httpx
import pytest

from conftest import FakeYouTube, make_item
from ytharvest.core.errors import QuotaExceededError, TransientFetchError
from ytharvest.schemas import FetchOptions
from ytharvest.services.fetcher import fetch_videos, quality_failure
from ytharvest.services.youtube_client import parse_video


def items_for(ids):
    return [make_item(i, f"migraine video {i}") for i in ids]


class Recorder:
    def __init__(self, keep=None):
        self.pages = []
        self.keep = keep

    async def __call__(self, videos):
        self.pages.append([v.id for v in videos])
        return len(videos) if self.keep is None else min(self.keep, len(videos))


@pytest.mark.asyncio
async def test_cap_is_respected_when_server_overfills_pages():
    pages = [[f"p0-{i}" for i in range(4)], [f"p1-{i}" for i in range(4)], [f"p2-{i}" for i in range(4)]]
    fake = FakeYouTube({"general": pages}, items_for(sum(pages, [])), honor_page_size=False)
    on_page = Recorder()

    async with fake.client() as client:
        total = await fetch_videos('"migraine"', FetchOptions(max_results=6), on_page, client=client)

    assert sum(len(p) for p in on_page.pages) == 6
    assert on_page.pages == [pages[0], pages[1][:2]]
    assert total == 6
    assert [c["maxResults"] for c in fake.search_calls] == ["6", "2"]


@pytest.mark.asyncio
async def test_each_cursor_used_once_until_exhausted():
    pages = [["a", "b"], ["c"], ["d"]]
    fake = FakeYouTube({"general": pages}, items_for("abcd"))
    on_page = Recorder()

    async with fake.client() as client:
        await fetch_videos("q", FetchOptions(max_results=50), on_page, client=client)

    assert [c.get("pageToken") for c in fake.search_calls] == [None, "1", "2"]
    assert on_page.pages == [["a", "b"], ["c"], ["d"]]


@pytest.mark.asyncio
async def test_returns_retained_count_not_fetched_count():
    fake = FakeYouTube({"general": [["a", "b", "c"]]}, items_for("abc"))
    on_page = Recorder(keep=1)

    async with fake.client() as client:
        total = await fetch_videos("q", FetchOptions(), on_page, client=client)

    assert total == 1
    assert on_page.pages == [["a", "b", "c"]]


@pytest.mark.asyncio
async def test_quality_thresholds_are_applied_before_delivery():
    items = [
        make_item("ok", "migraine"),
        make_item("few-views", "migraine", views=0),
        make_item("short", "migraine", duration="PT30S"),
        make_item("no-captions", "migraine", caption="false"),
    ]
    fake = FakeYouTube({"general": [[i["id"] for i in items]]}, items)
    on_page = Recorder()

    async with fake.client() as client:
        await fetch_videos("q", FetchOptions(min_view_count=1, min_duration=60, has_content=True), on_page, client=client)

    assert on_page.pages == [["ok"]]


@pytest.mark.asyncio
async def test_search_parameters_carry_scope_and_window():
    fake = FakeYouTube({"UCchan": [["a"]]}, items_for("a"))
    options = FetchOptions(
        max_results=10,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 6, 30),
        has_content=True,
    ).for_channel("UCchan")

    async with fake.client() as client:
        await fetch_videos('"migraine" (aura)', options, Recorder(), client=client)

    call = fake.search_calls[0]
    assert call["q"] == '"migraine" (aura)'
    assert call["channelId"] == "UCchan"
    assert call["publishedAfter"] == "2024-01-01T00:00:00Z"
    assert call["publishedBefore"] == "2024-06-30T23:59:59Z"
    assert call["videoCaption"] == "closedCaption"
    assert call["type"] == "video"
    assert call["key"] == "test-key"


@pytest.mark.asyncio
async def test_quota_error_is_typed_and_stops_the_pass():
    fake = FakeYouTube({}, [], fail_scopes={"general": (403, "quotaExceeded")})
    on_page = Recorder()

    async with fake.client() as client:
        with pytest.raises(QuotaExceededError):
            await fetch_videos("q", FetchOptions(), on_page, client=client)

    assert on_page.pages == []


@pytest.mark.asyncio
async def test_other_http_errors_are_transient_failures():
    fake = FakeYouTube({}, [], fail_scopes={"general": (400, "badRequest")})

    async with fake.client() as client:
        with pytest.raises(TransientFetchError) as exc_info:
            await fetch_videos("q", FetchOptions(), Recorder(), client=client)

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_non_json_body_is_a_transient_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(TransientFetchError) as exc_info:
            await fetch_videos("q", FetchOptions(), Recorder(), client=client)

    assert exc_info.value.status_code == 200


def test_parse_video():
    video = parse_video(make_item("abc", "Title", "Desc", views=1234, duration="PT1H2M3S", channel="Chan"))
    assert video.duration_seconds == 3723
    assert video.view_count == 1234
    assert video.url == "https://www.youtube.com/watch?v=abc"
    assert video.channel_name == "Chan"
    assert video.published_date.year == 2024
    assert video.has_captions is True
    assert video.search_name is None


def test_caption_requirement_is_optional():
    video = parse_video(make_item("abc", "t", caption="false"))
    assert quality_failure(video, FetchOptions(has_content=True)) == "no captions available"
    assert quality_failure(video, FetchOptions(has_content=False)) is None
