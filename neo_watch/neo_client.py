"""
NeoWs Client - Retrieves Near Earth Object data from NASA API

Thin async wrapper around httpx. Every request carries the API key and a
fixed timeout; failures are translated into the UpstreamError taxonomy and
never retried here.
"""
import logging
from datetime import date
from typing import Optional

import httpx

from .config import config
from .errors import ClientFault, UpstreamRejected, UpstreamUnreachable

logger = logging.getLogger(__name__)

FEED_PATH = "/neo/rest/v1/feed"
LOOKUP_PATH = "/neo/rest/v1/neo/{asteroid_id}"
BROWSE_PATH = "/neo/rest/v1/neo/browse"


def _error_details(response: httpx.Response) -> tuple[str, str]:
    """Pull (message, code) out of a NASA error body"""
    message = response.reason_phrase or f"HTTP {response.status_code}"
    code = "API_ERROR"
    try:
        body = response.json()
    except ValueError:
        return message, code

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message") or message
            code = error.get("code") or code
        elif body.get("error_message"):
            message = body["error_message"]
    return message, code


class NeoWsClient:
    """Fetches NEO data from NASA NeoWs API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or config.NASA_API_KEY
        self.base_url = base_url or config.NASA_BASE_URL
        self.timeout = timeout or config.NASA_TIMEOUT_SECONDS

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def fetch(self, path: str, params: Optional[dict] = None) -> dict:
        """
        GET a NeoWs path and return the decoded JSON body.

        Raises:
            UpstreamRejected: NASA answered with a non-2xx status
            UpstreamUnreachable: no response (connection error, timeout)
            ClientFault: the request could not be built or the body decoded
        """
        query = dict(params or {})
        query["api_key"] = self.api_key
        logger.info("NASA API Request: GET %s %s", path, {k: v for k, v in query.items() if k != "api_key"})

        try:
            response = await self.client.get(path, params=query)
        except httpx.TimeoutException as e:
            logger.warning("NASA API timeout on %s: %s", path, e)
            raise UpstreamUnreachable("NASA API is currently unavailable") from e
        except httpx.TransportError as e:
            logger.warning("NASA API unreachable on %s: %s", path, e)
            raise UpstreamUnreachable("NASA API is currently unavailable") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("NASA API request failed on %s: %s", path, e)
            raise ClientFault(str(e) or "Unknown error occurred") from e

        if not response.is_success:
            message, code = _error_details(response)
            logger.warning("NASA API Error %d on %s: %s", response.status_code, path, message)
            raise UpstreamRejected(response.status_code, message, code)

        try:
            return response.json()
        except ValueError as e:
            raise ClientFault(f"Invalid JSON from NASA API: {e}") from e

    async def feed(self, start_date: date, end_date: date) -> dict:
        """Fetch the close-approach feed for [start_date, end_date] (max 7 days)"""
        return await self.fetch(FEED_PATH, {
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        })

    async def lookup(self, asteroid_id: str) -> dict:
        """Fetch a single asteroid with its full close-approach history"""
        return await self.fetch(LOOKUP_PATH.format(asteroid_id=asteroid_id))

    async def browse(self, page: int = 0, size: int = 20) -> dict:
        """Page through the overall asteroid catalogue"""
        return await self.fetch(BROWSE_PATH, {"page": page, "size": size})

    async def aclose(self):
        """Close the HTTP client"""
        await self.client.aclose()
