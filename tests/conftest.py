import os

os.environ["YOUTUBE_API_KEY"] = "test-key"
os.environ["CACHE_ENABLED"] = "false"
os.environ["API_MAX_ATTEMPTS"] = "1"

from datetime import datetime, timezone

import httpx
import pytest

from ytharvest.core.errors import RecordPersistError


def make_item(video_id, title, description="", views=100, duration="PT5M", caption="true", channel="Health Channel"):
    return {
        "id": video_id,
        "snippet": {
            "title": title,
            "description": description,
            "publishedAt": "2024-03-01T12:00:00Z",
            "channelTitle": channel,
        },
        "contentDetails": {"duration": duration, "caption": caption},
        "statistics": {"viewCount": str(views)},
    }


class FakeYouTube:
    """Serves search.list and videos.list from canned pages keyed by channel scope."""

    def __init__(self, pages, items, honor_page_size=True, fail_scopes=None):
        self.pages = pages
        self.items = {item["id"]: item for item in items}
        self.honor_page_size = honor_page_size
        self.fail_scopes = fail_scopes or {}
        self.search_calls = []
        self.videos_calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        if request.url.path.endswith("/search"):
            self.search_calls.append(params)
            scope = params.get("channelId", "general")
            if scope in self.fail_scopes:
                status, reason = self.fail_scopes[scope]
                return httpx.Response(status, json={"error": {"code": status, "errors": [{"reason": reason}]}})
            pages = self.pages.get(scope, [[]])
            index = int(params.get("pageToken", "0"))
            ids = pages[index]
            if self.honor_page_size:
                ids = ids[:int(params["maxResults"])]
            body = {"items": [{"id": {"kind": "youtube#video", "videoId": i}} for i in ids]}
            if index + 1 < len(pages):
                body["nextPageToken"] = str(index + 1)
            return httpx.Response(200, json=body)
        if request.url.path.endswith("/videos"):
            self.videos_calls.append(params)
            ids = params["id"].split(",")
            return httpx.Response(200, json={"items": [self.items[i] for i in ids if i in self.items]})
        return httpx.Response(404)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def searched_scopes(self):
        return [call.get("channelId", "general") for call in self.search_calls]


class FakeStore:
    def __init__(self, fail_ids=()):
        self.videos = {}
        self.definitions = {}
        self.fail_ids = set(fail_ids)
        self.upsert_calls = []

    async def upsert_video(self, video):
        self.upsert_calls.append(video.id)
        if video.id in self.fail_ids:
            raise RecordPersistError(video.id, "connection reset")
        self.videos[video.id] = video

    async def upsert_search_definition(self, search_name, search_phrase, user_id="default_user"):
        self.definitions[search_name] = {
            "search_phrase": search_phrase,
            "user_id": user_id,
            "creation_date": datetime.now(timezone.utc),
        }


@pytest.fixture
def store():
    return FakeStore()
