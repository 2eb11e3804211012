"""Pydantic request/response models for reward endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RewardRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=120)
    category: str = Field("leisure", min_length=1, max_length=32)


class RewardCostUpdate(BaseModel):
    cost: int = Field(..., ge=0)


class RewardResponse(BaseModel):
    id: int
    owner_id: int
    title: str
    category: str
    cost: int
    status: str
    approved_by_id: int | None = None
    created_at: datetime
    approved_at: datetime | None = None
    claimed_at: datetime | None = None

    model_config = {"from_attributes": True}


class RewardListResponse(BaseModel):
    rewards: list[RewardResponse]


class RedeemResponse(BaseModel):
    reward: RewardResponse
    points_spent: int
    balance: int
    new_badges: list[str] = []
