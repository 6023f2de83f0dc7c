import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple
from ytharvest.schemas import VideoRecord

logger = logging.getLogger(__name__)


@dataclass
class FilterResult:
    kept: List[VideoRecord] = field(default_factory=list)
    dropped: List[Tuple[str, str]] = field(default_factory=list)


def mentions(video: VideoRecord, search_name: str) -> bool:
    needle = search_name.lower()
    return needle in video.title.lower() or needle in video.description.lower()


def filter_relevant(videos: Iterable[VideoRecord], search_name: str) -> FilterResult:
    """Keep only videos whose title or description contains ``search_name``.

    Upstream search matches on tokenised relevance, which is looser than a
    substring of the name.
    """
    result = FilterResult()
    for video in videos:
        if mentions(video, search_name):
            result.kept.append(video)
            continue
        reason = f"no mention of {search_name} in title or description"
        logger.info(f"Dropped video {video.id}: {reason}")
        result.dropped.append((video.id, reason))
    return result
