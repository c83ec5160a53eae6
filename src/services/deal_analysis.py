from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from loguru import logger

from src.ai.llm_client import LLMClient, LLMProviderError
from src.ai.prompts import ANALYST_SYSTEM_PROMPT, DealContextRow, DealsAnalysisPrompt
from src.deals.store import ANALYSIS_ROW_LIMIT, DealStore
from src.errors import AnalysisError
from src.models.deal import DealRecord

LLMFactory = Callable[[], LLMClient]

ANALYSIS_MAX_TOKENS = 1000

NO_DEALS_ANSWER = (
    "I couldn't find any deals matching your filters. "
    "Try running a search first or adjust your filters."
)
EMPTY_ANSWER = "Unable to generate an answer."


@dataclass
class DealAnalysis:
    answer: str
    deals_analyzed: int


def build_context_lines(records: List[DealRecord]) -> List[str]:
    return [
        DealContextRow(
            rank=rank,
            title=r.title,
            source=r.source,
            currency=r.currency,
            price=r.price,
            original_price=r.original_price,
            discount_percent=r.discount_percent,
            product_link=r.product_link,
        ).to_line()
        for rank, r in enumerate(records, start=1)
    ]


class DealAnalysisService:
    """Answer a free-form question using stored deals as context."""

    def __init__(self, store: DealStore, llm_factory: LLMFactory):
        self.store = store
        self.llm_factory = llm_factory

    async def analyze(
        self,
        question: str,
        query: Optional[str] = None,
        min_discount: Optional[float] = None,
    ) -> DealAnalysis:
        records = await self.store.find_deals(
            text=query, min_discount=min_discount, limit=ANALYSIS_ROW_LIMIT
        )
        if not records:
            logger.info(f"No stored deals match query={query!r} min_discount={min_discount}")
            return DealAnalysis(answer=NO_DEALS_ANSWER, deals_analyzed=0)

        prompt = DealsAnalysisPrompt(
            question=question, context_lines=build_context_lines(records)
        )
        llm = self.llm_factory()
        try:
            answer = await llm.complete(
                ANALYST_SYSTEM_PROMPT, prompt.to_prompt(), max_tokens=ANALYSIS_MAX_TOKENS
            )
        except LLMProviderError as e:
            raise AnalysisError("Failed to analyze deals with OpenAI", details=str(e)) from e

        logger.info(f"Analyzed {len(records)} deals")
        return DealAnalysis(answer=answer or EMPTY_ANSWER, deals_analyzed=len(records))
