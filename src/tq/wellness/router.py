"""Wellness activity endpoints: meditation, mood, journal."""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tq.auth.dependencies import get_current_account
from tq.database import get_session
from tq.db.models import Account
from tq.dependencies import get_redis_dep
from tq.events import commit_and_publish
from tq.wellness.enrichment import EnrichmentClient, annotate_journal_entry, get_enrichment_client
from tq.wellness.schemas import (
    JournalCreate,
    JournalResponse,
    MeditationCreate,
    MeditationResponse,
    MoodCreate,
    MoodResponse,
)
from tq.wellness.service import ActivityResult, complete_meditation, create_journal_entry, log_mood

router = APIRouter(prefix="/api/v1", tags=["Wellness"])


def _activity_fields(result: ActivityResult, account: Account) -> dict:
    return {
        "xp_awarded": result.xp_awarded,
        "points_awarded": result.points_awarded,
        "bonus_granted": result.bonus_granted,
        "leveled_up": result.leveled_up,
        "new_badges": result.new_badges,
        "experience": account.experience,
        "level": account.level,
        "points": account.points,
    }


@router.post("/me/meditations", response_model=MeditationResponse, status_code=201)
async def record_meditation(
    body: MeditationCreate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Record a finished meditation session."""
    result = await complete_meditation(db, account.id, body.minutes, body.kind)
    await commit_and_publish(db, redis)
    return MeditationResponse(
        session_id=result.session.id,
        minutes=result.session.minutes,
        daily_count=result.daily_count,
        **_activity_fields(result, account),
    )


@router.post("/me/moods", response_model=MoodResponse, status_code=201)
async def record_mood(
    body: MoodCreate,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Record a mood check-in."""
    result = await log_mood(db, account.id, body.mood)
    await commit_and_publish(db, redis)
    return MoodResponse(
        entry_id=result.entry.id,
        mood=result.entry.mood,
        score=result.entry.score,
        **_activity_fields(result, account),
    )


@router.post("/me/journal", response_model=JournalResponse, status_code=201)
async def write_journal_entry(
    body: JournalCreate,
    background_tasks: BackgroundTasks,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    enrichment: EnrichmentClient = Depends(get_enrichment_client),
):
    """Store a journal entry; text analysis is attached in the background."""
    result = await create_journal_entry(db, account.id, body.content, body.mood, body.tags)
    await commit_and_publish(db, redis)
    if enrichment.enabled:
        background_tasks.add_task(annotate_journal_entry, result.entry.id, enrichment)
    return JournalResponse(entry_id=result.entry.id, **_activity_fields(result, account))
