from fastapi import APIRouter

from offboarding.api.clearance import clearance_router
from offboarding.api.exits import exits_router
from offboarding.api.recovery import recovery_router
from offboarding.api.reports import reports_router
from offboarding.api.settlements import calculator_router, exit_settlement_router

api_router = APIRouter()
api_router.include_router(exits_router)
api_router.include_router(clearance_router)
api_router.include_router(recovery_router)
api_router.include_router(exit_settlement_router)
api_router.include_router(calculator_router)
api_router.include_router(reports_router)
