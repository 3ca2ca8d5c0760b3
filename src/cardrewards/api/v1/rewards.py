"""Reward simulation endpoint."""

from fastapi import APIRouter, Depends

from cardrewards.api.deps import get_reward_service
from cardrewards.schemas.rewards import PointsBreakdown, SimulationRequest
from cardrewards.services.rewards import RewardService

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.post(
    "/simulate",
    response_model=PointsBreakdown,
    summary="Simulate points for a hypothetical transaction",
    description="""
    Price a purchase before making it. Bonus points already consumed this
    statement period are taken into account; nothing is recorded.
    """,
)
async def simulate_points(
    request: SimulationRequest,
    service: RewardService = Depends(get_reward_service),
) -> PointsBreakdown:
    return await service.simulate(request)
