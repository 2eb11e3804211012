"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


# --- Badge ---


class BadgeDefinitionResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    category: str
    metric: str
    requirement: int
    xp_reward: int


class AllBadgesResponse(BaseModel):
    badges: list[BadgeDefinitionResponse]


class EarnedBadgeResponse(BaseModel):
    badge_id: str
    unlocked_at: datetime
    bonus_xp: int


class MyBadgesResponse(BaseModel):
    earned: list[EarnedBadgeResponse]
    total_available: int
    total_earned: int


class BadgeCheckResponse(BaseModel):
    new_badges: list[str]
    revoked: list[str] = []
    restored: list[str] = []
    bonus_xp: int = 0
    experience: int
    level: int


# --- Levels ---


class LevelEntry(BaseModel):
    level: int
    title: str
    description: str
    min_xp: int


class AllLevelsResponse(BaseModel):
    xp_per_level: int
    levels: list[LevelEntry]
