import httpx
import logging
from typing import List, Optional
from .fetcher import fetch_videos, quality_failure
from .filters import filter_relevant
from .json_sink import ensure_parent, merge_ids, merge_metadata, read_collection, reset_collection
from .query import construct_query, resolve_terms, search_expression
from .store import VideoStore
from .utils import backoff_client
from .youtube_client import get_video_details
from ytharvest.core.errors import FetchError, MissingInputError, RecordPersistError
from ytharvest.schemas import FetchOptions, RunTotals, SearchRequest, VideoRecord

logger = logging.getLogger(__name__)

GENERAL_SCOPE = "general"


class PageProcessor:
    """Per-pass page consumer: relevance filter, then both JSON sinks, then the store.

    Each record is upserted on its own, so one failing record does not keep the
    rest of the page out of the database.
    """

    def __init__(self, search_name: str, request: SearchRequest, store, totals: RunTotals):
        self.search_name = search_name
        self.output_file = request.output_file
        self.video_ids_file = request.video_ids_file
        self.store = store
        self.totals = totals

    async def __call__(self, videos: List[VideoRecord]) -> int:
        result = filter_relevant(videos, self.search_name)
        self.totals.dropped += len(result.dropped)

        tagged = [video.tagged(self.search_name) for video in result.kept]
        if not tagged:
            return 0

        await self.persist(tagged)
        return len(tagged)

    async def persist(self, videos: List[VideoRecord]) -> None:
        if self.output_file:
            merge_metadata(self.output_file, videos)
        if self.video_ids_file:
            merge_ids(self.video_ids_file, [video.id for video in videos])

        for video in videos:
            try:
                await self.store.upsert_video(video)
                logger.info(f"Stored video {video.id} in database")
            except RecordPersistError as e:
                logger.error(f"Error storing video {video.id}: {e}")


def prepare_outputs(request: SearchRequest) -> None:
    for path in (request.output_file, request.video_ids_file):
        if not path:
            continue
        ensure_parent(path)
        if request.reset_outputs:
            reset_collection(path)
            logger.info(f"Reset {path}")


def log_output_summary(request: SearchRequest, totals: RunTotals) -> None:
    if request.output_file:
        count = len(read_collection(request.output_file))
        logger.info(f"Final metadata file {request.output_file} contains {count} unique videos")
    if request.video_ids_file:
        count = len(read_collection(request.video_ids_file))
        logger.info(f"Final video IDs file {request.video_ids_file} contains {count} unique IDs")
    logger.info(f"Total videos fetched and stored: {totals.total}")


async def run_pass(
    scope: str,
    query: str,
    options: FetchOptions,
    processor: PageProcessor,
    totals: RunTotals,
    client: httpx.AsyncClient,
) -> int:
    fetched = await fetch_videos(query, options, processor, client=client)
    totals.add_pass(scope, fetched)
    logger.info(f"Completed fetching videos for {scope} with query {query!r}, total fetched: {fetched}")
    return fetched


async def run_search(
    request: SearchRequest,
    store: Optional[VideoStore] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RunTotals:
    """Run the general pass and one pass per channel, then record the search definition.

    Channel passes run one after another. A fetch error in a channel pass
    aborts the run unless ``request.continue_on_channel_error`` is set, in
    which case the channel is listed in ``failed_channels`` and the run goes on.
    """
    if not request.search_name:
        raise MissingInputError("a search name is required for a search run")
    if client is None:
        async with backoff_client() as owned:
            return await run_search(request, store=store, client=owned)

    store = store or VideoStore()
    search_name = request.search_name
    include, exclude = resolve_terms(search_name, request.search_phrases, request.search_terms, request.exclusion_terms)
    query = construct_query(search_name, include, exclude)
    totals = RunTotals(search_name=search_name, query=query)

    prepare_outputs(request)
    processor = PageProcessor(search_name, request, store, totals)
    options = request.fetch_options()

    logger.info(f"Fetching videos for combined query {query!r} with options: {options.model_dump_json()}")
    await run_pass(GENERAL_SCOPE, query, options, processor, totals, client)

    for channel_id in request.channels:
        logger.info(f"Fetching videos from channel {channel_id} with query {query!r}")
        try:
            await run_pass(channel_id, query, options.for_channel(channel_id), processor, totals, client)
        except FetchError as e:
            if not request.continue_on_channel_error:
                raise
            logger.error(f"Channel {channel_id} failed, continuing with remaining channels: {e}")
            totals.failed_channels.append(channel_id)

    expression = search_expression(search_name, request.search_phrases, request.search_terms, request.exclusion_terms)
    await store.upsert_search_definition(search_name, expression)

    log_output_summary(request, totals)
    return totals


async def run_single_video(
    request: SearchRequest,
    store: Optional[VideoStore] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> RunTotals:
    if not request.video_id:
        raise MissingInputError("a video id is required for a single video lookup")
    if client is None:
        async with backoff_client() as owned:
            return await run_single_video(request, store=store, client=owned)

    store = store or VideoStore()
    search_name = request.search_name or request.video_id
    totals = RunTotals(search_name=search_name)

    video = await get_video_details(client, request.video_id)
    if video is None:
        logger.warning(f"No metadata found for video {request.video_id}")
        return totals

    reason = quality_failure(video, request.fetch_options())
    if reason:
        logger.warning(f"Video {video.id} skipped: {reason}")
        return totals

    for path in (request.output_file, request.video_ids_file):
        if path:
            ensure_parent(path)
    processor = PageProcessor(search_name, request, store, totals)
    await processor.persist([video.tagged(search_name)])
    totals.add_pass(video.id, 1)
    logger.info(f"Processed and stored video {video.id}")

    if request.search_name:
        expression = search_expression(search_name, request.search_phrases, request.search_terms, request.exclusion_terms)
        await store.upsert_search_definition(search_name, expression)

    log_output_summary(request, totals)
    return totals


async def run(request: SearchRequest, store: Optional[VideoStore] = None, client: Optional[httpx.AsyncClient] = None) -> RunTotals:
    if request.video_id:
        return await run_single_video(request, store=store, client=client)
    return await run_search(request, store=store, client=client)
