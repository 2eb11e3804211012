"""Account snapshot endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from tq.accounts.schemas import AccountResponse
from tq.auth.dependencies import get_current_account
from tq.db.models import Account
from tq.gamification.leveling import compute_level

router = APIRouter(prefix="/api/v1", tags=["Accounts"])


def account_response(account: Account) -> AccountResponse:
    level_info = compute_level(account.experience)
    return AccountResponse(
        id=account.id,
        display_name=account.display_name,
        role=account.role,
        timezone=account.timezone_name,
        experience=account.experience,
        level=account.level,
        level_title=level_info["title"],
        xp_into_level=level_info["xp_into_level"],
        xp_to_next_level=level_info["xp_to_next_level"],
        next_level=level_info["next_level"],
        next_title=level_info["next_title"],
        points=account.points,
        streak=account.streak,
        longest_streak=account.longest_streak,
        last_activity_date=account.last_activity_date,
        daily_meditation_count=account.daily_meditation_count,
    )


@router.get("/me", response_model=AccountResponse)
async def get_me(account: Account = Depends(get_current_account)):
    """Current account stats (XP, level, points, streak)."""
    return account_response(account)
