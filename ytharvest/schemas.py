from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

DEFAULT_MAX_RESULTS = 50
DEFAULT_MIN_VIEW_COUNT = 1
DEFAULT_MIN_DURATION = 60
DEFAULT_HAS_CONTENT = True


class VideoRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    published_date: Optional[datetime] = None
    duration_seconds: int = 0
    view_count: int = 0
    url: str = ""
    channel_name: str = ""
    search_name: Optional[str] = None
    has_captions: bool = Field(default=False, exclude=True)

    def tagged(self, search_name: str) -> "VideoRecord":
        return self.model_copy(update={"search_name": search_name})

    def to_json(self) -> dict:
        return self.model_dump(mode="json")


class FetchOptions(BaseModel):
    """Read-only options for one pass of the fetch engine."""

    model_config = ConfigDict(frozen=True)

    max_results: int = DEFAULT_MAX_RESULTS
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_view_count: int = DEFAULT_MIN_VIEW_COUNT
    min_duration: int = DEFAULT_MIN_DURATION
    has_content: bool = DEFAULT_HAS_CONTENT
    channel_id: Optional[str] = None

    def for_channel(self, channel_id: str) -> "FetchOptions":
        return self.model_copy(update={"channel_id": channel_id})


class SearchRequest(BaseModel):
    """Fully resolved parameters of one run, after config and overrides are merged."""

    search_name: Optional[str] = None
    search_phrases: Optional[List[str]] = None
    search_terms: Optional[List[str]] = None
    exclusion_terms: List[str] = Field(default_factory=list)
    channels: List[str] = Field(default_factory=list)
    max_results: int = DEFAULT_MAX_RESULTS
    output_file: Optional[str] = None
    video_ids_file: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_view_count: int = DEFAULT_MIN_VIEW_COUNT
    min_duration: int = DEFAULT_MIN_DURATION
    has_content: bool = DEFAULT_HAS_CONTENT
    video_id: Optional[str] = None
    reset_outputs: bool = False
    continue_on_channel_error: bool = False

    def fetch_options(self) -> FetchOptions:
        return FetchOptions(
            max_results=self.max_results,
            start_date=self.start_date,
            end_date=self.end_date,
            min_view_count=self.min_view_count,
            min_duration=self.min_duration,
            has_content=self.has_content,
        )


class RunTotals(BaseModel):
    """Accumulator threaded through the general and channel passes of a run."""

    search_name: Optional[str] = None
    query: Optional[str] = None
    total: int = 0
    dropped: int = 0
    passes: Dict[str, int] = Field(default_factory=dict)
    failed_channels: List[str] = Field(default_factory=list)

    def add_pass(self, scope: str, retained: int) -> None:
        self.passes[scope] = self.passes.get(scope, 0) + retained
        self.total += retained
