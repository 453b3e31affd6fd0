"""Weekly reward read endpoints."""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.orm import selectinload

from stumble_higher.models import WeeklyReward
from stumble_higher.schemas.reward import WeeklyRewardResponse

from ..dependencies import SessionDep

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/{weekly_reward_id}", response_model=WeeklyRewardResponse)
async def get_weekly_reward(weekly_reward_id: str, db: SessionDep) -> WeeklyRewardResponse:
    """Return a weekly reward batch with its ranked distributions."""
    reward = (
        db.query(WeeklyReward)
        .options(selectinload(WeeklyReward.distributions))
        .filter(WeeklyReward.id == weekly_reward_id)
        .first()
    )
    if reward is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Reward batch not found",
        )
    return WeeklyRewardResponse.model_validate(reward)
