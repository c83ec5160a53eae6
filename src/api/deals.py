from __future__ import annotations

from fastapi import APIRouter, Depends

from src.api.deps import get_deal_analysis_service, get_deal_search_service
from src.api.schemas import (
    DealOut,
    DealsAnalyzeRequest,
    DealsAnalyzeResponse,
    DealsSearchRequest,
    DealsSearchResponse,
    ErrorResponse,
)
from src.services.deal_analysis import DealAnalysisService
from src.services.deal_search import DealSearchService

router = APIRouter(prefix="/api", tags=["deals"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request data"},
    500: {"model": ErrorResponse, "description": "Upstream, storage or configuration failure"},
}


@router.post("/deals", response_model=DealsSearchResponse, responses=ERROR_RESPONSES)
async def search_deals(
    body: DealsSearchRequest,
    service: DealSearchService = Depends(get_deal_search_service),
):
    result = await service.search(
        query=body.query,
        category=body.category,
        min_discount=body.min_discount,
        limit=body.limit,
    )
    return DealsSearchResponse(
        deals=[DealOut(**d.to_dict()) for d in result.deals],
        count=result.count,
        total_fetched=result.total_fetched,
    )


@router.post("/analyze-deals", response_model=DealsAnalyzeResponse, responses=ERROR_RESPONSES)
async def analyze_deals(
    body: DealsAnalyzeRequest,
    service: DealAnalysisService = Depends(get_deal_analysis_service),
):
    analysis = await service.analyze(
        question=body.question,
        query=body.query,
        min_discount=body.min_discount,
    )
    return DealsAnalyzeResponse(
        answer=analysis.answer, deals_analyzed=analysis.deals_analyzed
    )
