import httpx
import logging
from typing import Awaitable, Callable, List, Optional
from .utils import backoff_client
from .youtube_client import search_video_ids, get_videos_by_ids
from ytharvest.schemas import FetchOptions, VideoRecord

logger = logging.getLogger(__name__)

# Receives one page of results and returns how many of them it kept.
OnPage = Callable[[List[VideoRecord]], Awaitable[int]]


def quality_failure(video: VideoRecord, options: FetchOptions) -> Optional[str]:
    if video.view_count < options.min_view_count:
        return f"view count {video.view_count} below {options.min_view_count}"
    if video.duration_seconds < options.min_duration:
        return f"duration {video.duration_seconds}s below {options.min_duration}s"
    if options.has_content and not video.has_captions:
        return "no captions available"
    return None


async def fetch_videos(
    query: str,
    options: FetchOptions,
    on_page: OnPage,
    client: Optional[httpx.AsyncClient] = None,
) -> int:
    """Page through search results for ``query`` and feed each page to ``on_page``.

    At most ``options.max_results`` records are delivered in total; the last
    page is cut short if needed. ``on_page`` is awaited before the next page is
    requested. Returns the sum of what ``on_page`` reported as retained.

    Fetch errors propagate; a failed page is never skipped.
    """
    if client is None:
        async with backoff_client() as owned:
            return await fetch_videos(query, options, on_page, client=owned)

    scope = f"channel {options.channel_id}" if options.channel_id else "general search"
    delivered = 0
    retained = 0
    page_number = 0
    page_token: Optional[str] = None

    while delivered < options.max_results:
        remaining = options.max_results - delivered
        video_ids, next_page_token = await search_video_ids(client, query, options, remaining, page_token)
        page_number += 1

        videos = await get_videos_by_ids(client, video_ids)
        page = []
        for video in videos:
            reason = quality_failure(video, options)
            if reason:
                logger.info(f"Skipped video {video.id}: {reason}")
                continue
            page.append(video)
        page = page[:remaining]

        logger.info(f"Page {page_number} for {scope}: {len(video_ids)} results, {len(page)} passed quality checks")
        if page:
            delivered += len(page)
            retained += await on_page(page)

        if not next_page_token:
            break
        page_token = next_page_token

    return retained
