
import httpx
from contextlib import asynccontextmanager
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential
from ytharvest.core.settings import settings

@asynccontextmanager
async def backoff_client():
    async with httpx.AsyncClient(timeout=settings.api_timeout) as client:
        yield client

def is_retryable(exc: BaseException) -> bool:
    # quota and client errors are final; only network trouble and 5xx are retried
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False

@retry(
    retry=retry_if_exception(is_retryable),
    wait=wait_exponential(multiplier=0.5, min=1, max=8),
    stop=stop_after_attempt(settings.api_max_attempts),
    reraise=True,
)
async def api_get(client: httpx.AsyncClient, url: str, **kwargs) -> httpx.Response:
    resp = await client.get(url, **kwargs)
    resp.raise_for_status()
    return resp
