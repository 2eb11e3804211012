"""Reward requests: request -> cost approval -> redemption.

Points only move on redemption, under the owner's account lock, and only
after every precondition has passed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.accounts.service import is_supervisor, lock_account
from tq.config import get_settings
from tq.db.models import Account, RewardRequest
from tq.errors import Forbidden, InsufficientBalance, InvalidState, NotFound, TooManyActive
from tq.gamification.badge_engine import BadgeCheckResult, reconcile_account
from tq.gamification.xp_service import apply_points
from tq.timeutils import utcnow

logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
REDEEMED = "redeemed"


@dataclass
class RedemptionResult:
    reward: RewardRequest
    points_spent: int
    balance: int
    badges: BadgeCheckResult = field(default_factory=BadgeCheckResult)


async def _get_reward(db: AsyncSession, reward_id: int) -> RewardRequest:
    result = await db.execute(
        select(RewardRequest).where(
            RewardRequest.id == reward_id,
            RewardRequest.deleted_at.is_(None),
        )
    )
    reward = result.scalar_one_or_none()
    if reward is None:
        raise NotFound(f"Reward {reward_id} not found")
    return reward


async def _get_owned_reward(db: AsyncSession, account_id: int, reward_id: int) -> RewardRequest:
    reward = await _get_reward(db, reward_id)
    if reward.owner_id != account_id:
        raise NotFound(f"Reward {reward_id} not found")
    return reward


async def request_reward(
    db: AsyncSession,
    account_id: int,
    title: str,
    category: str = "leisure",
    now: datetime | None = None,
) -> RewardRequest:
    """Create a pending request with cost 0. Capped per account."""
    if now is None:
        now = utcnow()
    await lock_account(db, account_id)

    active = (await db.execute(
        select(func.count())
        .select_from(RewardRequest)
        .where(RewardRequest.owner_id == account_id, RewardRequest.deleted_at.is_(None))
    )).scalar_one()
    cap = get_settings().max_active_reward_requests
    if active >= cap:
        raise TooManyActive(f"At most {cap} reward requests may be open at once")

    reward = RewardRequest(
        owner_id=account_id,
        title=title,
        category=category,
        cost=0,
        status=PENDING,
        created_at=now,
    )
    db.add(reward)
    await db.flush()
    logger.info("Reward requested: account=%d reward=%d", account_id, reward.id)
    return reward


async def set_reward_cost(
    db: AsyncSession,
    caller: Account,
    reward_id: int,
    cost: int,
    now: datetime | None = None,
) -> RewardRequest:
    """Price a request and approve it. Approved requests may be re-priced."""
    if now is None:
        now = utcnow()
    if not caller.is_supervisor:
        raise Forbidden("Only supervisors can set reward costs")
    if cost < 0:
        raise InvalidState("Cost must be non-negative")

    reward = await _get_reward(db, reward_id)
    if not await is_supervisor(db, caller.id, reward.owner_id):
        raise NotFound(f"Reward {reward_id} not found")

    await lock_account(db, reward.owner_id)
    await db.refresh(reward)
    if reward.status == REDEEMED:
        raise InvalidState("Reward already redeemed")

    reward.cost = cost
    reward.status = APPROVED
    reward.approved_by_id = caller.id
    reward.approved_at = now
    await db.flush()
    logger.info("Reward priced: reward=%d cost=%d by=%d", reward.id, cost, caller.id)
    return reward


async def redeem_reward(
    db: AsyncSession,
    account_id: int,
    reward_id: int,
    now: datetime | None = None,
) -> RedemptionResult:
    """Spend points on an approved reward. All-or-nothing.

    Raises:
        NotFound: reward missing, deleted, or owned by someone else.
        InvalidState: reward not approved (pending or already redeemed).
        InsufficientBalance: points below cost.
    """
    if now is None:
        now = utcnow()
    account = await lock_account(db, account_id)
    reward = await _get_owned_reward(db, account_id, reward_id)

    if reward.status != APPROVED:
        raise InvalidState(f"Reward is {reward.status}, not approved")
    if account.points < reward.cost:
        raise InsufficientBalance(account.points, reward.cost)

    apply_points(account, -reward.cost)
    account.updated_at = now
    reward.status = REDEEMED
    reward.claimed_at = now
    await db.flush()
    logger.info(
        "Reward redeemed: account=%d reward=%d cost=%d balance=%d",
        account_id, reward.id, reward.cost, account.points,
    )

    badges = await reconcile_account(db, account, now)
    return RedemptionResult(reward=reward, points_spent=reward.cost, balance=account.points, badges=badges)


async def delete_reward(
    db: AsyncSession,
    account_id: int,
    reward_id: int,
    now: datetime | None = None,
) -> RewardRequest:
    """Soft-delete a request in any status. Balance is unaffected."""
    if now is None:
        now = utcnow()
    reward = await _get_owned_reward(db, account_id, reward_id)
    reward.deleted_at = now
    await db.flush()
    logger.info("Reward deleted: account=%d reward=%d", account_id, reward_id)
    return reward


async def list_rewards(
    db: AsyncSession,
    account_id: int,
    status: str | None = None,
) -> list[RewardRequest]:
    stmt = select(RewardRequest).where(
        RewardRequest.owner_id == account_id,
        RewardRequest.deleted_at.is_(None),
    )
    if status is not None:
        stmt = stmt.where(RewardRequest.status == status)
    result = await db.execute(stmt.order_by(RewardRequest.created_at.desc(), RewardRequest.id.desc()))
    return list(result.scalars())
