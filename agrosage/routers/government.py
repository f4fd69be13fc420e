"""
AgroSage — /api/government Router
"""

from fastapi import APIRouter

from agrosage.models.schemas import GovernmentOverview, PolicyAdvisorInput
from agrosage.services.government_service import build_overview, policy_input

router = APIRouter(prefix="/api/government", tags=["Government"])


@router.get("/overview", response_model=GovernmentOverview, summary="Yield index, MSP compliance and grievances")
async def overview():
    return build_overview()


@router.get("/policy-input", response_model=PolicyAdvisorInput,
            summary="Fresh overview summarised as policy advisor input")
async def current_policy_input():
    return policy_input(build_overview())
