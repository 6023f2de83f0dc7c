
from datetime import date
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from ytharvest.core.config_file import build_request, load_config
from ytharvest.core.errors import FetchError, MissingInputError, QuotaExceededError, SinkIOError
from ytharvest.schemas import RunTotals
from ytharvest.services.pipeline import run
from ytharvest.services.store import VideoStore
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

class FetchBody(BaseModel):
    search_name: Optional[str] = None
    search_phrases: Optional[List[str]] = None
    channels: Optional[List[str]] = None
    max_results: Optional[int] = None
    output_file: Optional[str] = None
    video_ids_file: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_view_count: Optional[int] = None
    min_duration: Optional[int] = None
    has_content: Optional[bool] = None
    video_id: Optional[str] = None
    reset_outputs: Optional[bool] = None
    continue_on_channel_error: Optional[bool] = None
    config_file: Optional[str] = None

@router.post("/fetch")
async def fetch_endpoint(body: FetchBody) -> RunTotals:
    overrides = body.model_dump(exclude={"config_file"})
    request = build_request(load_config(body.config_file), overrides)

    try:
        return await run(request)
    except MissingInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        logger.error(f"Fetch run failed: {e}")
        status = 429 if isinstance(e, QuotaExceededError) else 502
        raise HTTPException(status_code=status, detail=str(e))
    except SinkIOError as e:
        logger.error(f"Fetch run failed writing output: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/search-definitions")
async def list_search_definitions() -> List[Dict[str, Any]]:
    return await VideoStore().list_search_definitions()
