from fastapi import APIRouter, Depends

from src.api.deals import ERROR_RESPONSES
from src.api.deps import get_plan_advisor
from src.api.schemas import PlanRequest, PlanResponse
from src.services.plan_advisor import PlanAdvisor

router = APIRouter(prefix="/api", tags=["agent"])


@router.post("/agent", response_model=PlanResponse, responses=ERROR_RESPONSES)
async def generate_plan(
    body: PlanRequest,
    advisor: PlanAdvisor = Depends(get_plan_advisor),
):
    plan = await advisor.generate_plan(
        sites=body.sites,
        min_discount=body.min_discount,
        max_discount=body.max_discount,
        keywords=body.keywords,
        received_params=body.model_dump(by_alias=True, exclude_unset=True),
    )
    return PlanResponse(plan=plan.plan, debug_info=plan.debug_info)
