"""Pydantic response models for account endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class AccountResponse(BaseModel):
    """Authoritative account state; clients overwrite their optimistic copy with it."""

    id: int
    display_name: str
    role: str
    timezone: str | None = None
    experience: int
    level: int
    level_title: str
    xp_into_level: int
    xp_to_next_level: int
    next_level: int
    next_title: str
    points: int
    streak: int
    longest_streak: int
    last_activity_date: date | None = None
    daily_meditation_count: int
