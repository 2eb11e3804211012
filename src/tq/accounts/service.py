"""Account rows, per-account locking, and the supervising-relationship oracle."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tq.db.models import Account, SupervisorLink
from tq.errors import Forbidden, NotFound
from tq.gamification.xp_service import apply_experience
from tq.timeutils import utcnow

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_account(db: AsyncSession, account_id: int) -> Account:
    """Fetch an account by ID or raise NotFound."""
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()
    if account is None:
        raise NotFound(f"Account {account_id} not found")
    return account


async def lock_account(db: AsyncSession, account_id: int) -> Account:
    """Load an account row with ``SELECT ... FOR UPDATE``.

    Every economic mutation starts here so concurrent requests for the same
    account serialize on the row. Backends without row locks (SQLite) fall
    back to the ``version_id`` check at flush time.
    """
    result = await db.execute(
        select(Account)
        .where(Account.id == account_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    account = result.scalar_one_or_none()
    if account is None:
        raise NotFound(f"Account {account_id} not found")
    return account


# ---------------------------------------------------------------------------
# Creation and relationships
# ---------------------------------------------------------------------------


async def create_account(
    db: AsyncSession,
    display_name: str,
    role: str = "member",
    timezone_name: str | None = None,
) -> Account:
    now = utcnow()
    account = Account(
        display_name=display_name,
        role=role,
        timezone_name=timezone_name,
        created_at=now,
        updated_at=now,
    )
    db.add(account)
    await db.flush()
    logger.info("Account created: id=%d role=%s", account.id, role)
    return account


async def link_supervisor(db: AsyncSession, supervisor_id: int, account_id: int) -> SupervisorLink:
    """Record that ``supervisor_id`` supervises ``account_id`` (idempotent)."""
    supervisor = await get_account(db, supervisor_id)
    if not supervisor.is_supervisor:
        raise Forbidden("Only supervisors can supervise accounts")
    await get_account(db, account_id)

    result = await db.execute(
        select(SupervisorLink).where(
            SupervisorLink.supervisor_id == supervisor_id,
            SupervisorLink.account_id == account_id,
        )
    )
    link = result.scalar_one_or_none()
    if link is None:
        link = SupervisorLink(supervisor_id=supervisor_id, account_id=account_id)
        db.add(link)
        await db.flush()
    return link


async def is_supervisor(db: AsyncSession, supervisor_id: int, account_id: int) -> bool:
    """Whether ``supervisor_id`` has a supervising relationship with ``account_id``."""
    result = await db.execute(
        select(SupervisorLink.id).where(
            SupervisorLink.supervisor_id == supervisor_id,
            SupervisorLink.account_id == account_id,
        )
    )
    return result.first() is not None


async def require_supervision(db: AsyncSession, caller: Account, account_id: int) -> None:
    """Raise Forbidden for non-supervisors and NotFound when no link exists."""
    if not caller.is_supervisor:
        raise Forbidden("Supervisor role required")
    if not await is_supervisor(db, caller.id, account_id):
        raise NotFound(f"Account {account_id} not found")


# ---------------------------------------------------------------------------
# Out-of-band corrections
# ---------------------------------------------------------------------------


async def correct_experience(db: AsyncSession, account_id: int, experience: int) -> Account:
    """Overwrite an account's experience (support/admin correction).

    Badges earned under the old total are left alone here; the next badge
    check revokes any level badge the new total no longer justifies.
    """
    account = await lock_account(db, account_id)
    previous = account.experience
    apply_experience(account, max(experience, 0) - previous)
    account.updated_at = utcnow()
    await db.flush()
    logger.info(
        "Experience corrected: account=%d from=%d to=%d",
        account_id, previous, account.experience,
    )
    return account
