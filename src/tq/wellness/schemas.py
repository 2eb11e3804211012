"""Pydantic request/response models for wellness endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Mood = Literal["happy", "calm", "neutral", "sad", "anxious", "angry"]


class MeditationCreate(BaseModel):
    minutes: int = Field(..., ge=0, le=600)
    kind: str = Field("guided", min_length=1, max_length=32)


class MoodCreate(BaseModel):
    mood: Mood


class JournalCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=20_000)
    mood: Mood | None = None
    tags: list[str] = Field(default_factory=list, max_length=20)


class ActivityResponse(BaseModel):
    xp_awarded: int
    points_awarded: int
    bonus_granted: bool
    leveled_up: bool
    new_badges: list[str]
    experience: int
    level: int
    points: int


class MeditationResponse(ActivityResponse):
    session_id: int
    minutes: int
    daily_count: int


class MoodResponse(ActivityResponse):
    entry_id: int
    mood: str
    score: int


class JournalResponse(ActivityResponse):
    entry_id: int
