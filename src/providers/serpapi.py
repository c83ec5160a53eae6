from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from src.config import SearchProviderConfig
from src.errors import UpstreamFetchError
from src.providers.base import ShoppingSearchProvider

ENGINE = "google_shopping"
LANGUAGE = "en"
COUNTRY = "us"

FETCH_FAILED = "Failed to fetch deals from SerpAPI"


class SerpApiClient(ShoppingSearchProvider):
    """Google Shopping search through SerpAPI."""

    name = "serpapi"

    def __init__(
        self,
        config: SearchProviderConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport

    def _params(self, query: str, limit: int) -> Dict[str, Any]:
        return {
            "engine": ENGINE,
            "q": query,
            "num": str(limit),
            "hl": LANGUAGE,
            "gl": COUNTRY,
            "api_key": self.config.api_key,
        }

    async def search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout, transport=self._transport
            ) as client:
                resp = await client.get(self.config.endpoint, params=self._params(query, limit))
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"SerpAPI request failed with status {e.response.status_code}: {e.response.text}"
            )
            raise UpstreamFetchError(
                FETCH_FAILED,
                details=f"SerpAPI request failed with status {e.response.status_code}",
            ) from e
        except httpx.RequestError as e:
            logger.error(f"SerpAPI request failed: {e}")
            raise UpstreamFetchError(FETCH_FAILED, details=str(e)) from e
        except ValueError as e:
            logger.error(f"SerpAPI returned invalid JSON: {e}")
            raise UpstreamFetchError(FETCH_FAILED, details="Invalid JSON from SerpAPI") from e

        if not isinstance(data, dict):
            raise UpstreamFetchError(FETCH_FAILED, details="Unexpected SerpAPI response shape")
        if data.get("error"):
            logger.error(f"SerpAPI error: {data['error']}")
            raise UpstreamFetchError(FETCH_FAILED, details=f"SerpAPI error: {data['error']}")

        results = data.get("shopping_results") or []
        if not isinstance(results, list):
            raise UpstreamFetchError(FETCH_FAILED, details="Unexpected SerpAPI response shape")

        logger.info(f"SerpAPI returned {len(results)} results for '{query}'")
        return results[:limit]
