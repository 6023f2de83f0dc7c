
import httpx
import isodate
import logging
from typing import Any, Dict, List, Optional, Tuple
from .utils import api_get
from ytharvest.core.errors import QuotaExceededError, TransientFetchError
from ytharvest.core.redis import cache_get, cache_set, cache_delete
from ytharvest.core.settings import settings
from ytharvest.schemas import FetchOptions, VideoRecord, YOUTUBE_WATCH_URL

logger = logging.getLogger(__name__)

BASE = "https://www.googleapis.com/youtube/v3"
MAX_PAGE_SIZE = 50
QUOTA_REASONS = {"quotaExceeded", "rateLimitExceeded", "userRateLimitExceeded", "dailyLimitExceeded"}


def _error_reason(response: httpx.Response) -> Optional[str]:
    try:
        errors = response.json().get("error", {}).get("errors", [])
    except ValueError:
        return None
    if errors:
        return errors[0].get("reason")
    return None


async def _get(client: httpx.AsyncClient, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
    params = {**params, "key": settings.youtube_api_key}
    try:
        r = await api_get(client, f"{BASE}/{path}", params=params, timeout=settings.api_timeout)
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        reason = _error_reason(e.response)
        if status == 429 or reason in QUOTA_REASONS:
            raise QuotaExceededError(f"{path}: {reason or 'rate limited'}", status) from e
        raise TransientFetchError(f"{path} failed with HTTP {status} ({reason})", status) from e
    except httpx.TransportError as e:
        raise TransientFetchError(f"{path} request failed: {e!r}") from e
    try:
        return r.json()
    except ValueError as e:
        raise TransientFetchError(f"{path} returned a non-JSON body", r.status_code) from e


def parse_video(item: Dict[str, Any]) -> VideoRecord:
    snippet = item.get("snippet", {})
    details = item.get("contentDetails", {})
    statistics = item.get("statistics", {})

    duration = 0
    if details.get("duration"):
        try:
            duration = int(isodate.parse_duration(details["duration"]).total_seconds())
        except (isodate.ISO8601Error, ValueError):
            logger.warning(f"Unparseable duration {details['duration']!r} for video {item['id']}")

    published = None
    if snippet.get("publishedAt"):
        try:
            published = isodate.parse_datetime(snippet["publishedAt"])
        except (isodate.ISO8601Error, ValueError):
            logger.warning(f"Unparseable publishedAt {snippet['publishedAt']!r} for video {item['id']}")

    return VideoRecord(
        id=item["id"],
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        published_date=published,
        duration_seconds=duration,
        view_count=int(statistics.get("viewCount", 0)),
        url=YOUTUBE_WATCH_URL.format(video_id=item["id"]),
        channel_name=snippet.get("channelTitle", ""),
        has_captions=str(details.get("caption", "false")).lower() == "true",
    )


def search_params(query: str, options: FetchOptions, page_size: int, page_token: Optional[str] = None) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "q": query,
        "part": "id",
        "type": "video",
        "maxResults": max(1, min(page_size, MAX_PAGE_SIZE)),
    }
    if options.channel_id:
        params["channelId"] = options.channel_id
    if options.start_date:
        params["publishedAfter"] = f"{options.start_date.isoformat()}T00:00:00Z"
    if options.end_date:
        params["publishedBefore"] = f"{options.end_date.isoformat()}T23:59:59Z"
    if options.has_content:
        params["videoCaption"] = "closedCaption"
    if page_token:
        params["pageToken"] = page_token
    return params


async def search_video_ids(
    client: httpx.AsyncClient,
    query: str,
    options: FetchOptions,
    page_size: int,
    page_token: Optional[str] = None,
) -> Tuple[List[str], Optional[str]]:
    data = await _get(client, "search", search_params(query, options, page_size, page_token))
    ids = []
    for item in data.get("items", []):
        video_id = (item.get("id") or {}).get("videoId")
        if video_id:
            ids.append(video_id)
    return ids, data.get("nextPageToken")


async def get_video_items(client: httpx.AsyncClient, video_ids: List[str]) -> List[Dict[str, Any]]:
    if not video_ids:
        return []

    items: List[Dict[str, Any]] = []
    for i in range(0, len(video_ids), MAX_PAGE_SIZE):
        batch_ids = video_ids[i:i + MAX_PAGE_SIZE]
        data = await _get(client, "videos", {
            "part": "snippet,contentDetails,statistics",
            "id": ",".join(batch_ids),
            "maxResults": MAX_PAGE_SIZE,
        })
        items.extend(data.get("items", []))

    # keep search order; ids the API no longer knows are skipped
    by_id = {item["id"]: item for item in items}
    return [by_id[video_id] for video_id in video_ids if video_id in by_id]


async def get_videos_by_ids(client: httpx.AsyncClient, video_ids: List[str]) -> List[VideoRecord]:
    return [parse_video(item) for item in await get_video_items(client, video_ids)]


async def get_video_details(client: httpx.AsyncClient, video_id: str) -> Optional[VideoRecord]:
    cache_key = f"video:{video_id}"
    cached = await cache_get(cache_key)
    if cached:
        try:
            return parse_video(cached)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Dropping malformed cache entry {cache_key}: {e}")
            await cache_delete(cache_key)

    items = await get_video_items(client, [video_id])
    if not items:
        return None

    await cache_set(cache_key, items[0], ttl=settings.video_cache_ttl)
    return parse_video(items[0])


async def search_channel_by_name(client: httpx.AsyncClient, channel_name: str) -> Optional[str]:
    data = await _get(client, "search", {
        "part": "snippet",
        "q": channel_name,
        "type": "channel",
        "maxResults": 10,
    })
    items = data.get("items", [])

    for item in items:
        if item["snippet"]["title"] == channel_name:
            return item["id"]["channelId"]

    for item in items:
        if item["snippet"]["title"].lower() == channel_name.lower():
            return item["id"]["channelId"]

    return None
