"""Contingent policy for translation requests.

The decision itself is a pure function over plain data so the same
branching serves both the optimistic (untrusted) and the mandatory
(trusted) check.
"""

from dataclasses import dataclass

from aws_lambda_powertools import Logger

from .contingent_limits import ContingentLimits
from .models import ContingentConfig
from .period import current_period
from .quota_store import QuotaStore

logger = Logger(child=True)

REASON_STOP_ALL = "stop_all"
REASON_GLOBAL_LIMIT = "global_limit"
REASON_USER_LIMIT = "user_limit"


@dataclass(frozen=True)
class EffectiveLimits:
    """Limits after applying stored overrides over static defaults."""

    per_user_limit: int
    global_limit: int
    global_buffer: int

    @property
    def global_threshold(self) -> int:
        """Global usage at which all users are halted."""
        return self.global_limit - self.global_buffer


@dataclass(frozen=True)
class ContingentSnapshot:
    """Inputs for one policy evaluation."""

    config: ContingentConfig
    global_usage: int
    user_usage: int


@dataclass
class ContingentStatus:
    """Outcome of a contingent evaluation."""

    allowed: bool
    reason: str | None = None
    global_usage: int = 0
    user_usage: int = 0
    global_remaining: int = 0
    user_remaining: int = 0


def resolve_limits(
    config: ContingentConfig, limits: ContingentLimits | None = None
) -> EffectiveLimits:
    """Apply stored config values over the static fallback limits.

    Args:
        config: Stored contingent config (fields may be None)
        limits: Static fallback limits

    Returns:
        EffectiveLimits to evaluate against
    """
    limits = limits or ContingentLimits()
    return EffectiveLimits(
        per_user_limit=_first_set(config.per_user_monthly_limit, limits.PER_USER_MONTHLY_CHARS),
        global_limit=_first_set(config.global_monthly_limit, limits.GLOBAL_MONTHLY_CHARS),
        global_buffer=_first_set(config.global_buffer, limits.GLOBAL_BUFFER_CHARS),
    )


def evaluate_contingent(
    snapshot: ContingentSnapshot, limits: ContingentLimits | None = None
) -> ContingentStatus:
    """Decide whether translation is allowed.

    Checks, in order, short-circuiting on the first hit: the global kill
    switch, global usage against limit minus buffer, then user usage
    against the per-user limit. Reaching a limit counts as exceeding it.

    Args:
        snapshot: Config and counters to evaluate
        limits: Static fallback limits

    Returns:
        ContingentStatus describing the decision
    """
    effective = resolve_limits(snapshot.config, limits)
    global_usage = snapshot.global_usage
    user_usage = snapshot.user_usage
    global_remaining = max(0, effective.global_threshold - global_usage)
    user_remaining = max(0, effective.per_user_limit - user_usage)

    if snapshot.config.stop_all:
        return ContingentStatus(
            allowed=False,
            reason=REASON_STOP_ALL,
            global_usage=global_usage,
            user_usage=user_usage,
            global_remaining=0,
            user_remaining=0,
        )

    if global_usage >= effective.global_threshold:
        return ContingentStatus(
            allowed=False,
            reason=REASON_GLOBAL_LIMIT,
            global_usage=global_usage,
            user_usage=user_usage,
            global_remaining=0,
            user_remaining=user_remaining,
        )

    if user_usage >= effective.per_user_limit:
        return ContingentStatus(
            allowed=False,
            reason=REASON_USER_LIMIT,
            global_usage=global_usage,
            user_usage=user_usage,
            global_remaining=global_remaining,
            user_remaining=0,
        )

    return ContingentStatus(
        allowed=True,
        global_usage=global_usage,
        user_usage=user_usage,
        global_remaining=global_remaining,
        user_remaining=user_remaining,
    )


def is_exceeded(snapshot: ContingentSnapshot, limits: ContingentLimits | None = None) -> bool:
    """Check whether the contingent is exhausted for a snapshot."""
    return not evaluate_contingent(snapshot, limits).allowed


class ContingentGuard:
    """Evaluates the contingent against trusted, store-fetched data."""

    def __init__(self, store: QuotaStore, limits: ContingentLimits | None = None):
        """Initialize guard.

        Args:
            store: Quota store to read config and counters from
            limits: Static fallback limits. Defaults to the store's limits.
        """
        self.store = store
        self.limits = limits or store.limits

    def load_snapshot(self, user_id: str, period: str) -> ContingentSnapshot:
        """Fetch config and counters for a user.

        A missing config is created with defaults and read back before
        evaluation; it is never treated as unlimited.

        Args:
            user_id: Opaque user ID
            period: Accounting period (YYYY-MM)

        Returns:
            ContingentSnapshot of the stored state

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        config = self.store.get_config(period)
        if config is None:
            # Happens on the first request of a new month
            logger.info("Contingent config missing, creating", extra={"period": period})
            self.store.ensure_config_exists(period)
            config = self.store.read_config(period)

        return ContingentSnapshot(
            config=config,
            global_usage=self.store.read_global_usage(period),
            user_usage=self.store.read_user_usage(user_id, period).char_count,
        )

    def check_limits(self, user_id: str, period: str | None = None) -> ContingentStatus:
        """Check if a translation is allowed under current limits.

        Args:
            user_id: Opaque user ID
            period: Accounting period. Defaults to the current period.

        Returns:
            ContingentStatus indicating if the request should proceed

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        period = period or current_period()
        snapshot = self.load_snapshot(user_id, period)
        status = evaluate_contingent(snapshot, self.limits)

        if not status.allowed:
            logger.warning(
                "Contingent exceeded",
                extra={
                    "user_id": user_id,
                    "period": period,
                    "reason": status.reason,
                    "global_usage": status.global_usage,
                    "user_usage": status.user_usage,
                },
            )
            return status

        # Log warning if approaching the global threshold
        threshold = resolve_limits(snapshot.config, self.limits).global_threshold
        if threshold > 0 and status.global_usage >= threshold * self.limits.WARNING_THRESHOLD:
            logger.warning(
                "Approaching global monthly contingent",
                extra={
                    "period": period,
                    "global_usage": status.global_usage,
                    "threshold": threshold,
                    "percentage": round(status.global_usage / threshold * 100, 1),
                },
            )

        return status

    def is_exceeded(self, period: str, user_id: str) -> bool:
        """Check whether the contingent is exhausted for a user.

        Raises:
            StoreUnavailableError: If the store cannot be read
        """
        return not self.check_limits(user_id, period).allowed


def get_limit_message(reason: str) -> str:
    """Get the user-facing message for a contingent denial.

    Args:
        reason: The limit type ('stop_all', 'global_limit' or 'user_limit')

    Returns:
        A message the client can show next to its simulated output.
    """
    if reason == REASON_STOP_ALL:
        return (
            "Translation is paused for all users at the moment. "
            "Please try again later."
        )

    if reason == REASON_GLOBAL_LIMIT:
        return (
            "The free translation contingent for this month is used up. "
            "Translation will be available again next month."
        )

    if reason == REASON_USER_LIMIT:
        return (
            "You have used your free translation contingent for this month. "
            "It resets at the start of next month."
        )

    return "Translation is temporarily unavailable. Please try again later."


def _first_set(value: int | None, fallback: int) -> int:
    return fallback if value is None else value
