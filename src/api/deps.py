"""Dependency providers wiring stores, provider clients and services.

Provider and LLM clients are handed to the services as factories. A missing
API key only surfaces when a service actually calls out, after the request
body has been validated.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.ai.llm_client import LLMClient
from src.config import LLMConfig, SearchProviderConfig, get_settings
from src.db.database import get_db
from src.deals.store import DealStore, SqlDealStore
from src.providers.base import ShoppingSearchProvider
from src.providers.serpapi import SerpApiClient
from src.services.deal_analysis import DealAnalysisService, LLMFactory
from src.services.deal_search import DealSearchService, ProviderFactory
from src.services.plan_advisor import PlanAdvisor


async def get_deal_store(db: AsyncSession = Depends(get_db)) -> DealStore:
    return SqlDealStore(db)


def build_search_provider() -> ShoppingSearchProvider:
    return SerpApiClient(SearchProviderConfig.from_settings(get_settings()))


def build_llm_client() -> LLMClient:
    return LLMClient(LLMConfig.from_settings(get_settings()))


def get_search_provider_factory() -> ProviderFactory:
    return build_search_provider


def get_llm_client_factory() -> LLMFactory:
    return build_llm_client


def get_deal_search_service(
    provider_factory: ProviderFactory = Depends(get_search_provider_factory),
    store: DealStore = Depends(get_deal_store),
) -> DealSearchService:
    return DealSearchService(provider_factory, store)


def get_deal_analysis_service(
    store: DealStore = Depends(get_deal_store),
    llm_factory: LLMFactory = Depends(get_llm_client_factory),
) -> DealAnalysisService:
    return DealAnalysisService(store, llm_factory)


def get_plan_advisor(
    llm_factory: LLMFactory = Depends(get_llm_client_factory),
) -> PlanAdvisor:
    return PlanAdvisor(llm_factory)
