from fastapi import APIRouter

from src.api.agent import router as agent_router
from src.api.deals import router as deals_router

api_router = APIRouter()
api_router.include_router(deals_router)
api_router.include_router(agent_router)
