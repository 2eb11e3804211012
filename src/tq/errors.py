"""Domain errors for the gamification economy.

Every error is terminal for the operation that raised it. Services raise,
routers let them propagate without committing, and the global handler in
``tq.middleware.error_handler`` renders ``{"detail": ..., "code": ...}``.
"""

from __future__ import annotations


class EconomyError(Exception):
    """Base class for all domain errors."""

    code = "economy_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(EconomyError):
    """Entity missing, deleted, or not owned by the caller."""

    code = "not_found"
    status_code = 404


class Forbidden(EconomyError):
    """Role or relationship check failed."""

    code = "forbidden"
    status_code = 403


class InvalidState(EconomyError):
    """Operation not legal in the entity's current status."""

    code = "invalid_state"
    status_code = 409


class InsufficientBalance(EconomyError):
    code = "insufficient_balance"
    status_code = 409

    def __init__(self, balance: int, cost: int) -> None:
        super().__init__(f"Insufficient points: balance {balance}, cost {cost}")
        self.balance = balance
        self.cost = cost


class InvalidSelector(EconomyError):
    """Recurrence request missing or carrying bad weekday/day-of-month selectors."""

    code = "invalid_selector"
    status_code = 422


class QuotaExceeded(EconomyError):
    """Outright rejection on quota. The recurrence generator skips instead."""

    code = "quota_exceeded"
    status_code = 409


class TooManyActive(EconomyError):
    code = "too_many_active"
    status_code = 429


class PastDate(EconomyError):
    """Task anchored on a day that has already ended for the owner."""

    code = "past_date"
    status_code = 422
