from fastapi import APIRouter

from sayso.api.v1.endpoints import asr, health, plan

v1_router = APIRouter()
v1_router.include_router(health.router, tags=["health"])
v1_router.include_router(asr.router, tags=["asr"])
v1_router.include_router(plan.router, tags=["plan"])
