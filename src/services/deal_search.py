from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from src.deals.normalizer import Deal, filter_by_min_discount, normalize_result
from src.deals.store import DealStore
from src.providers.base import ShoppingSearchProvider

ProviderFactory = Callable[[], ShoppingSearchProvider]

DEFAULT_LIMIT = 30


@dataclass
class DealSearchResult:
    deals: List[Deal] = field(default_factory=list)
    total_fetched: int = 0

    @property
    def count(self) -> int:
        return len(self.deals)


class DealSearchService:
    """Fetch, normalize, filter and persist deals for a search query."""

    def __init__(self, provider_factory: ProviderFactory, store: DealStore):
        self.provider_factory = provider_factory
        self.store = store

    async def search(
        self,
        query: str,
        category: Optional[str] = None,
        min_discount: Optional[float] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> DealSearchResult:
        provider = self.provider_factory()
        raw_results = await provider.search(query, limit)
        fetched = [normalize_result(r) for r in raw_results]
        deals = filter_by_min_discount(fetched, min_discount)
        logger.info(
            f"Search '{query}': fetched {len(fetched)}, kept {len(deals)}"
            f" (min_discount={min_discount})"
        )

        # A storage failure fails the whole search; nothing is returned unstored
        if deals:
            await self.store.add_deals(deals, search_query=query, category=category)

        return DealSearchResult(deals=deals, total_fetched=len(fetched))
