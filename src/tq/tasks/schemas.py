"""Pydantic request/response models for task endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from tq.tasks.rules import Frequency, Priority


class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    priority: Priority = Priority.MEDIUM
    frequency: Frequency = Frequency.ONCE
    due_date: date | None = None  # defaults to today in the owner's timezone
    weekdays: list[int] | None = None  # 0=Sunday .. 6=Saturday
    month_days: list[int] | None = None  # 1..31


class TaskResponse(BaseModel):
    id: int
    owner_id: int
    created_by_id: int | None = None
    title: str
    priority: str
    due_date: date
    frequency: str
    completed: bool
    completed_at: datetime | None = None
    experience_reward: int
    points_reward: int

    model_config = {"from_attributes": True}


class SkippedOccurrenceResponse(BaseModel):
    due_date: date
    reason: str
    limit: int


class TaskCreateResponse(BaseModel):
    created: list[TaskResponse]
    skipped: list[SkippedOccurrenceResponse]


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]


class ToggleResponse(BaseModel):
    task_id: int
    status: str
    xp_awarded: int
    points_awarded: int
    leveled_up: bool
    new_badges: list[str]
    experience: int
    level: int
    points: int
