"""Optimistic and mandatory contingent enforcement.

Both call sites share evaluate_contingent(). Only the mandatory check,
run before any quota-consuming operation, actually blocks usage; the
optimistic check is a UX hint and is never trusted.
"""

from dataclasses import dataclass

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit

from .contingent_policy import (
    ContingentGuard,
    ContingentSnapshot,
    ContingentStatus,
    evaluate_contingent,
    get_limit_message,
)
from .exceptions import QuotaExceededError, StoreUnavailableError
from .models import ContingentConfig
from .period import current_period

logger = Logger(child=True)
metrics = Metrics(namespace="MultiLangTranslate")


@dataclass
class OptimisticDecision:
    """Non-authoritative contingent hint for the client."""

    period: str
    status: ContingentStatus
    simulate: bool
    message: str | None = None

    @property
    def allowed(self) -> bool:
        """Whether the client should expect a real translation."""
        return self.status.allowed and not self.simulate


def simulated_translations(text: str, target_languages: list[str]) -> dict[str, str]:
    """Placeholder output used instead of real provider calls."""
    return {language: f"[{language}] {text}" for language in target_languages}


class EnforcementCoordinator:
    """Runs the contingent policy from both trust boundaries."""

    def __init__(self, guard: ContingentGuard, simulate_translation: bool = False):
        """Initialize coordinator.

        Args:
            guard: Guard reading trusted inputs from the store
            simulate_translation: Bypass real translation regardless of quota
        """
        self.guard = guard
        self.simulate_translation = simulate_translation

    def optimistic_check(
        self,
        user_id: str,
        period: str | None = None,
        snapshot: ContingentSnapshot | None = None,
    ) -> OptimisticDecision:
        """Evaluate the contingent for UX feedback only.

        Store failures degrade to the default config and zero counters.

        Args:
            user_id: Opaque user ID
            period: Accounting period. Defaults to the current period.
            snapshot: Client-supplied inputs; fetched from the store if omitted

        Returns:
            OptimisticDecision telling the client whether to simulate
        """
        period = period or current_period()
        snapshot = snapshot or self._load_snapshot_or_defaults(user_id, period)
        status = evaluate_contingent(snapshot, self.guard.limits)
        simulate = self.simulate_translation or not status.allowed

        return OptimisticDecision(
            period=period,
            status=status,
            simulate=simulate,
            message=None if status.allowed else get_limit_message(status.reason or ""),
        )

    def mandatory_check(self, user_id: str, period: str) -> ContingentStatus:
        """Enforce the contingent before a quota-consuming operation.

        Fails closed: if the store cannot be read, StoreUnavailableError
        propagates and the operation must not proceed.

        Args:
            user_id: Opaque user ID
            period: Accounting period (YYYY-MM)

        Returns:
            ContingentStatus of the allowed request

        Raises:
            QuotaExceededError: If any limit is reached
            StoreUnavailableError: If config or counters cannot be read
        """
        status = self.guard.check_limits(user_id, period)
        if not status.allowed:
            reason = status.reason or "unknown"
            metrics.add_dimension(name="Reason", value=reason)
            metrics.add_metric(name="ContingentDenials", unit=MetricUnit.Count, value=1)
            raise QuotaExceededError(reason, get_limit_message(reason))
        return status

    def _load_snapshot_or_defaults(self, user_id: str, period: str) -> ContingentSnapshot:
        store = self.guard.store

        try:
            config = store.read_config(period)
        except StoreUnavailableError as e:
            logger.warning("Using default contingent config", extra={"period": period, "error": e.message})
            config = ContingentConfig.defaults(self.guard.limits)

        try:
            global_usage = store.read_global_usage(period)
        except StoreUnavailableError as e:
            logger.warning("Assuming zero global usage", extra={"period": period, "error": e.message})
            global_usage = 0

        try:
            user_usage = store.read_user_usage(user_id, period).char_count
        except StoreUnavailableError as e:
            logger.warning(
                "Assuming zero user usage",
                extra={"user_id": user_id, "period": period, "error": e.message},
            )
            user_usage = 0

        return ContingentSnapshot(config=config, global_usage=global_usage, user_usage=user_usage)
