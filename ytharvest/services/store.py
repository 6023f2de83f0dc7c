from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.sql import func
from ytharvest.core.database import async_session_maker
from ytharvest.core.errors import RecordPersistError
from ytharvest.models import SearchConfig, Video
from ytharvest.schemas import VideoRecord
import logging

logger = logging.getLogger(__name__)

DEFAULT_USER = "default_user"


def video_upsert(video: VideoRecord):
    values = {
        "video_id": video.id,
        "search_name": video.search_name,
        "title": video.title,
        "description": video.description,
        "published_date": video.published_date,
        "duration_seconds": video.duration_seconds,
        "view_count": video.view_count,
        "url": video.url,
        "channel_name": video.channel_name,
    }
    stmt = insert(Video).values(**values)
    updates = {key: stmt.excluded[key] for key in values if key != "video_id"}
    updates["updated_at"] = func.now()
    return stmt.on_conflict_do_update(index_elements=[Video.video_id], set_=updates)


def search_definition_upsert(search_name: str, search_phrase: str, user_id: str = DEFAULT_USER):
    stmt = insert(SearchConfig).values(
        user_id=user_id,
        search_phrase=search_phrase,
        search_name=search_name,
        creation_date=func.now(),
    )
    # a re-run replaces the stored phrase and counts as a fresh creation
    return stmt.on_conflict_do_update(
        index_elements=[SearchConfig.search_name],
        set_={
            "user_id": stmt.excluded.user_id,
            "search_phrase": stmt.excluded.search_phrase,
            "creation_date": func.now(),
        },
    )


class VideoStore:
    def __init__(self, session_maker=None):
        self.session_maker = session_maker or async_session_maker

    async def upsert_video(self, video: VideoRecord) -> None:
        try:
            async with self.session_maker() as session:
                await session.execute(video_upsert(video))
                await session.commit()
        except Exception as e:
            raise RecordPersistError(video.id, str(e)) from e

    async def upsert_search_definition(self, search_name: str, search_phrase: str, user_id: str = DEFAULT_USER) -> None:
        async with self.session_maker() as session:
            try:
                await session.execute(search_definition_upsert(search_name, search_phrase, user_id))
                await session.commit()
            except Exception as e:
                logger.error(f"Error storing search definition for {search_name}: {e}")
                await session.rollback()
                raise
        logger.info(f"Stored search definition for search_name {search_name}")

    async def list_search_definitions(self) -> list:
        async with self.session_maker() as session:
            result = await session.execute(select(SearchConfig).order_by(SearchConfig.search_name))
            return [
                {
                    "searchName": row.search_name,
                    "searchPhrase": row.search_phrase,
                    "userId": row.user_id,
                    "creationDate": row.creation_date.isoformat() if row.creation_date else None,
                }
                for row in result.scalars().all()
            ]
