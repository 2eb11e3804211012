"""Task API endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tq.auth.dependencies import get_current_account
from tq.database import get_session
from tq.db.models import Account
from tq.dependencies import get_redis_dep
from tq.events import commit_and_publish
from tq.tasks.schemas import (
    SkippedOccurrenceResponse,
    TaskCreateRequest,
    TaskCreateResponse,
    TaskListResponse,
    TaskResponse,
    ToggleResponse,
)
from tq.tasks.service import (
    TaskCreationResult,
    create_tasks,
    delete_task,
    list_tasks,
    toggle_task_completion,
)

router = APIRouter(prefix="/api/v1", tags=["Tasks"])


def _creation_response(result: TaskCreationResult) -> TaskCreateResponse:
    return TaskCreateResponse(
        created=[TaskResponse.model_validate(t) for t in result.created],
        skipped=[
            SkippedOccurrenceResponse(due_date=s.due_date, reason=s.reason, limit=s.limit)
            for s in result.skipped
        ],
    )


async def _create(db: AsyncSession, caller: Account, owner_id: int, body: TaskCreateRequest) -> TaskCreateResponse:
    result = await create_tasks(
        db,
        caller,
        owner_id,
        body.title,
        body.priority,
        body.frequency,
        body.due_date,
        weekdays=body.weekdays,
        month_days=body.month_days,
    )
    await db.commit()
    return _creation_response(result)


@router.post("/me/tasks", response_model=TaskCreateResponse, status_code=201)
async def create_my_tasks(
    body: TaskCreateRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Create one task or expand a recurring one. Full days are skipped, not rejected."""
    return await _create(db, account, account.id, body)


@router.post("/accounts/{account_id}/tasks", response_model=TaskCreateResponse, status_code=201)
async def create_tasks_for_account(
    account_id: int,
    body: TaskCreateRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Supervisor creates tasks for an account it supervises."""
    return await _create(db, account, account_id, body)


@router.get("/me/tasks", response_model=TaskListResponse)
async def get_my_tasks(
    start: date | None = Query(None),
    end: date | None = Query(None),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Active tasks, by due date then priority."""
    tasks = await list_tasks(db, account.id, start=start, end=end)
    return TaskListResponse(tasks=[TaskResponse.model_validate(t) for t in tasks])


@router.post("/me/tasks/{task_id}/toggle", response_model=ToggleResponse)
async def toggle_my_task(
    task_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
):
    """Complete or un-complete a task."""
    result = await toggle_task_completion(db, account.id, task_id)
    await commit_and_publish(db, redis)
    return ToggleResponse(
        task_id=result.task.id,
        status=result.status,
        xp_awarded=result.xp_awarded,
        points_awarded=result.points_awarded,
        leveled_up=result.leveled_up,
        new_badges=result.new_badges,
        experience=account.experience,
        level=account.level,
        points=account.points,
    )


@router.delete("/me/tasks/{task_id}", status_code=204)
async def delete_my_task(
    task_id: int,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_session),
):
    """Soft-delete a task."""
    await delete_task(db, account.id, task_id)
    await db.commit()
