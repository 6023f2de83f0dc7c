import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ytharvest.core.errors import ConfigAbsentError
from ytharvest.core.settings import settings
from ytharvest.schemas import (
    DEFAULT_HAS_CONTENT,
    DEFAULT_MAX_RESULTS,
    DEFAULT_MIN_DURATION,
    DEFAULT_MIN_VIEW_COUNT,
    SearchRequest,
)

logger = logging.getLogger(__name__)


class FileConfig(BaseModel):
    """Search defaults read from the YAML config file (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    search_name: Optional[str] = Field(default=None, alias="searchName")
    disease: Optional[str] = None
    search_terms: Optional[List[str]] = Field(default=None, alias="searchTerms")
    exclusion_terms: Optional[List[str]] = Field(default=None, alias="exclusionTerms")
    channels: Optional[List[str]] = Field(default=None, alias="channelName")
    max_results: Optional[int] = Field(default=None, alias="maxResults")
    output_file: Optional[str] = Field(default=None, alias="outputFile")
    video_ids_file: Optional[str] = Field(default=None, alias="videoIdsFile")
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    min_view_count: int = Field(default=DEFAULT_MIN_VIEW_COUNT, alias="minViewCount")
    min_duration: int = Field(default=DEFAULT_MIN_DURATION, alias="minDuration")
    has_content: bool = Field(default=DEFAULT_HAS_CONTENT, alias="hasContent")


def read_config_file(path: str) -> FileConfig:
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigAbsentError(f"Cannot read config file {path}: {e}") from e
    try:
        return FileConfig.model_validate(raw or {})
    except ValidationError as e:
        raise ConfigAbsentError(f"Invalid config file {path}: {e}") from e


def load_config(path: Optional[str] = None) -> FileConfig:
    path = path or settings.config_file
    try:
        return read_config_file(path)
    except ConfigAbsentError as e:
        logger.info(f"No usable config file at {path}, using default values ({e})")
        return FileConfig()


def build_request(config: FileConfig, overrides: Optional[Dict[str, Any]] = None) -> SearchRequest:
    """Merge explicit parameters over the config file, field by field.

    ``None`` in ``overrides`` means "not given". ``disease`` is accepted as a
    legacy alias of ``search_name`` on both sides.
    """
    o = {k: v for k, v in (overrides or {}).items() if v is not None}

    def pick(key: str, default: Any = None) -> Any:
        if key in o:
            return o[key]
        value = getattr(config, key)
        return default if value is None else value

    return SearchRequest(
        search_name=o.get("search_name") or o.get("disease") or config.search_name or config.disease,
        search_phrases=o.get("search_phrases"),
        search_terms=config.search_terms,
        exclusion_terms=config.exclusion_terms or [],
        channels=pick("channels", []),
        max_results=pick("max_results", DEFAULT_MAX_RESULTS),
        output_file=pick("output_file"),
        video_ids_file=pick("video_ids_file"),
        start_date=pick("start_date"),
        end_date=pick("end_date"),
        min_view_count=pick("min_view_count"),
        min_duration=pick("min_duration"),
        has_content=pick("has_content"),
        video_id=o.get("video_id"),
        reset_outputs=o.get("reset_outputs", False),
        continue_on_channel_error=o.get("continue_on_channel_error", settings.continue_on_channel_error),
    )
