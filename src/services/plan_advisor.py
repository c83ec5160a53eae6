from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.ai.llm_client import LLMProviderError
from src.ai.prompts import PLANNER_SYSTEM_PROMPT, SearchPlanPrompt
from src.errors import PlanGenerationError
from src.services.deal_analysis import LLMFactory

PLAN_MAX_TOKENS = 500
EMPTY_PLAN = "No plan generated"


@dataclass
class SearchPlan:
    plan: str
    debug_info: Dict[str, Any]


class PlanAdvisor:
    """Explain in plain language how a deal search would be carried out."""

    def __init__(self, llm_factory: LLMFactory):
        self.llm_factory = llm_factory

    async def generate_plan(
        self,
        sites: List[str],
        min_discount: float,
        max_discount: float,
        keywords: Optional[str] = None,
        received_params: Optional[Dict[str, Any]] = None,
    ) -> SearchPlan:
        prompt = SearchPlanPrompt(
            sites=sites,
            min_discount=min_discount,
            max_discount=max_discount,
            keywords=keywords,
        )
        llm = self.llm_factory()
        try:
            plan = await llm.complete(
                PLANNER_SYSTEM_PROMPT, prompt.to_prompt(), max_tokens=PLAN_MAX_TOKENS
            )
        except LLMProviderError as e:
            raise PlanGenerationError("OpenAI API error", details=str(e)) from e

        debug_info = {
            "receivedParams": received_params
            if received_params is not None
            else {
                "sites": sites,
                "minDiscount": min_discount,
                "maxDiscount": max_discount,
                "keywords": keywords,
            },
            "sitesCount": len(sites),
            "discountRange": f"{min_discount:g}% - {max_discount:g}%",
            "hasKeywords": bool(keywords),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return SearchPlan(plan=plan or EMPTY_PLAN, debug_info=debug_info)
