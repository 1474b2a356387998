"""Pydantic models for contingent API responses."""

from pydantic import BaseModel


class EnsureContingentResponse(BaseModel):
    """Response for POST /contingent/ensure."""

    success: bool = True
    period: str
    created: bool


class ContingentStatusResponse(BaseModel):
    """Response for GET /contingent/status (optimistic, non-binding)."""

    period: str
    allowed: bool
    simulate: bool
    reason: str | None = None
    message: str | None = None
    user_usage: int
    global_usage: int
    user_remaining: int
    global_remaining: int


class ContingentSummary(BaseModel):
    """Effective contingent and usage totals for a period."""

    stop_all: bool
    global_limit: int
    global_buffer: int
    per_user_limit: int
    global_usage: int
    global_remaining: int
    users_char_count: int


class UserStatistic(BaseModel):
    """One user's usage joined with their identity."""

    user_id: str
    display_name: str
    kind: str | None = None
    char_count: int
    target_languages: list[str]
    last_updated: str | None = None


class StatisticsResponse(BaseModel):
    """Response for GET /statistics."""

    period: str
    contingent: ContingentSummary
    users: list[UserStatistic]
