"""Best-effort pub/sub of economy events for live clients.

Services queue events on the request's session while they hold the account
lock; routers publish them only after the transaction commits. Delivery is
not part of the economy: a missing or failing Redis never affects the
operation that produced the event, and a rolled-back transaction publishes
nothing.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

_PENDING_KEY = "tq.pending_events"


def queue_event(db: AsyncSession, channel: str, payload: dict) -> None:
    """Hold ``payload`` for ``pubsub:<channel>`` until the session commits."""
    db.info.setdefault(_PENDING_KEY, []).append((channel, payload))


def pending_events(db: AsyncSession) -> list[tuple[str, dict]]:
    return list(db.info.get(_PENDING_KEY, ()))


def discard_events(db: AsyncSession) -> None:
    db.info.pop(_PENDING_KEY, None)


async def publish_event(redis: object, channel: str, payload: dict) -> None:
    """Publish ``payload`` on ``pubsub:<channel>`` if Redis is available."""
    if redis is None:
        return
    try:
        await redis.publish(f"pubsub:{channel}", json.dumps(payload, default=str))  # type: ignore[union-attr]
    except Exception:
        logger.warning("Failed to publish %s event", channel, exc_info=True)


async def commit_and_publish(db: AsyncSession, redis: object) -> None:
    """Commit the session, then publish whatever the services queued.

    Queued events are dropped when the commit raises.
    """
    try:
        await db.commit()
    except Exception:
        discard_events(db)
        raise
    events = pending_events(db)
    discard_events(db)
    for channel, payload in events:
        await publish_event(redis, channel, payload)
