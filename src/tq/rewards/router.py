"""Reward ledger API endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tq.auth.dependencies import get_current_account
from tq.database import get_session
from tq.db.models import Account
from tq.dependencies import get_redis_dep
from tq.events import commit_and_publish
from tq.rewards.ledger import delete_reward, list_rewards, redeem_reward, request_reward, set_reward_cost
from tq.rewards.schemas import (
    RedeemResponse,
    RewardCostUpdate,
    RewardListResponse,
    RewardRequestCreate,
    RewardResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Rewards"])


@router.post("/me/rewards", response_model=RewardResponse, status_code=201)
async def request_my_reward(
    body: RewardRequestCreate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Ask for a reward. It stays pending until a supervisor prices it."""
    reward = await request_reward(db, account.id, body.title, body.category)
    await db.commit()
    return RewardResponse.model_validate(reward)


@router.get("/me/rewards", response_model=RewardListResponse)
async def get_my_rewards(
    status: Literal["pending", "approved", "redeemed"] | None = Query(None),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """List the current account's reward requests, newest first."""
    rewards = await list_rewards(db, account.id, status=status)
    return RewardListResponse(rewards=[RewardResponse.model_validate(r) for r in rewards])


@router.post("/rewards/{reward_id}/cost", response_model=RewardResponse)
async def price_reward(
    reward_id: int,
    body: RewardCostUpdate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Supervisor sets the cost of a supervised account's reward and approves it."""
    reward = await set_reward_cost(db, account, reward_id, body.cost)
    await db.commit()
    return RewardResponse.model_validate(reward)


@router.post("/me/rewards/{reward_id}/redeem", response_model=RedeemResponse)
async def redeem_my_reward(
    reward_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Spend points on an approved reward."""
    result = await redeem_reward(db, account.id, reward_id)
    await commit_and_publish(db, redis)
    return RedeemResponse(
        reward=RewardResponse.model_validate(result.reward),
        points_spent=result.points_spent,
        balance=result.balance,
        new_badges=result.badges.new_badges,
    )


@router.delete("/me/rewards/{reward_id}", status_code=204)
async def delete_my_reward(
    reward_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Withdraw a reward request in any status. Points are not refunded."""
    await delete_reward(db, account.id, reward_id)
    await db.commit()
