"""Gamification API endpoints: badges and levels."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.auth.dependencies import get_current_account
from tq.database import get_session
from tq.db.models import Account, BadgeUnlock
from tq.dependencies import get_redis_dep
from tq.events import commit_and_publish
from tq.gamification.badge_catalog import BADGE_DEFINITIONS
from tq.gamification.badge_engine import BadgeCheckResult, check_and_unlock, unlock_auto_badge
from tq.gamification.leveling import RANKS, XP_PER_LEVEL, xp_for_level
from tq.gamification.schemas import (
    AllBadgesResponse,
    AllLevelsResponse,
    BadgeCheckResponse,
    BadgeDefinitionResponse,
    EarnedBadgeResponse,
    LevelEntry,
    MyBadgesResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


def _check_response(result: BadgeCheckResult, account: Account) -> BadgeCheckResponse:
    return BadgeCheckResponse(
        new_badges=result.new_badges,
        revoked=result.revoked,
        restored=result.restored,
        bonus_xp=result.bonus_xp,
        experience=account.experience,
        level=account.level,
    )


# ── Public endpoints ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges():
    """Get all badge definitions."""
    return AllBadgesResponse(
        badges=[
            BadgeDefinitionResponse(
                id=b.id,
                name=b.name,
                description=b.description,
                icon=b.icon,
                category=b.category,
                metric=b.metric.value,
                requirement=b.requirement,
                xp_reward=b.xp_reward,
            )
            for b in BADGE_DEFINITIONS
        ]
    )


@router.get("/levels", response_model=AllLevelsResponse)
async def list_levels():
    """Get the rank titles and the XP each one starts at."""
    return AllLevelsResponse(
        xp_per_level=XP_PER_LEVEL,
        levels=[
            LevelEntry(
                level=r["level"],
                title=r["title"],
                description=r["description"],
                min_xp=xp_for_level(r["level"]),
            )
            for r in RANKS
        ],
    )


# ── Authenticated endpoints ──


@router.get("/me/badges", response_model=MyBadgesResponse)
async def get_my_badges(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Get the current account's active badges."""
    result = await db.execute(
        select(BadgeUnlock)
        .where(BadgeUnlock.account_id == account.id, BadgeUnlock.revoked_at.is_(None))
        .order_by(BadgeUnlock.unlocked_at.desc())
    )
    earned = result.scalars().all()

    return MyBadgesResponse(
        earned=[
            EarnedBadgeResponse(badge_id=u.badge_id, unlocked_at=u.unlocked_at, bonus_xp=u.bonus_xp)
            for u in earned
        ],
        total_available=len(BADGE_DEFINITIONS),
        total_earned=len(earned),
    )


@router.post("/me/badges/check", response_model=BadgeCheckResponse)
async def check_my_badges(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Run the badge pass for the current account."""
    result = await check_and_unlock(db, account.id)
    await commit_and_publish(db, redis)
    return _check_response(result, account)


@router.post("/me/badges/{badge_id}/unlock", response_model=BadgeCheckResponse)
async def unlock_my_auto_badge(
    badge_id: str,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Unlock an explicitly-triggered badge (e.g. tutorial completed)."""
    result = await unlock_auto_badge(db, account.id, badge_id)
    await commit_and_publish(db, redis)
    return _check_response(result, account)
