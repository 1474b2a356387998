"""Contingent service - period maintenance, status hints and statistics."""

from aws_lambda_powertools import Logger

from contingent.models import (
    ContingentStatusResponse,
    ContingentSummary,
    EnsureContingentResponse,
    StatisticsResponse,
    UserStatistic,
)
from shared.contingent_policy import resolve_limits
from shared.enforcement import EnforcementCoordinator
from shared.models import UserKind
from shared.period import current_period
from shared.quota_store import QuotaStore

logger = Logger()

UNKNOWN_DISPLAY_NAME = "unknown"


class ContingentService:
    """Service layer for contingent documents and usage reporting."""

    def __init__(self, store: QuotaStore, coordinator: EnforcementCoordinator) -> None:
        """Initialize contingent service.

        Args:
            store: Quota store instance
            coordinator: Enforcement coordinator for status hints
        """
        self.store = store
        self.coordinator = coordinator

    def ensure_contingent(self, period: str | None = None) -> EnsureContingentResponse:
        """Create the period's default contingent config if missing.

        Raises:
            StoreUnavailableError: If the config cannot be written
        """
        period = period or current_period()
        created = self.store.ensure_config_exists(period)
        return EnsureContingentResponse(period=period, created=created)

    def get_status(self, user_id: str) -> ContingentStatusResponse:
        """Optimistic contingent status for the caller's UI.

        Args:
            user_id: Opaque user ID of the caller

        Returns:
            Non-binding status; translate re-checks on the server
        """
        decision = self.coordinator.optimistic_check(user_id)
        status = decision.status
        return ContingentStatusResponse(
            period=decision.period,
            allowed=decision.allowed,
            simulate=decision.simulate,
            reason=status.reason,
            message=decision.message,
            user_usage=status.user_usage,
            global_usage=status.global_usage,
            user_remaining=status.user_remaining,
            global_remaining=status.global_remaining,
        )

    def is_privileged(self, user_id: str) -> bool:
        """Check whether the caller has a privileged identity.

        Raises:
            StoreUnavailableError: If the identity cannot be read
        """
        identity = self.store.get_user_identity(user_id)
        return identity is not None and identity.kind == UserKind.PRIVILEGED

    def get_statistics(self, period: str | None = None) -> StatisticsResponse:
        """Build the usage report for a period.

        Usage records are joined with identities by user ID; users without
        an identity are shown as 'unknown'.

        Args:
            period: Accounting period. Defaults to the current period.

        Returns:
            Contingent summary and per-user rows, highest usage first

        Raises:
            StoreUnavailableError: If any document cannot be read
        """
        period = period or current_period()
        config = self.store.read_config(period)
        effective = resolve_limits(config, self.store.limits)
        global_usage = self.store.read_global_usage(period)
        usage_records = self.store.list_user_usage(period)
        identities = {identity.user_id: identity for identity in self.store.list_user_identities()}

        rows = []
        for record in usage_records:
            identity = identities.get(record.user_id)
            rows.append(
                UserStatistic(
                    user_id=record.user_id,
                    display_name=identity.display_name if identity else UNKNOWN_DISPLAY_NAME,
                    kind=identity.kind.value if identity else None,
                    char_count=record.char_count,
                    target_languages=record.target_languages,
                    last_updated=record.last_updated,
                )
            )
        rows.sort(key=lambda row: row.char_count, reverse=True)

        summary = ContingentSummary(
            stop_all=config.stop_all,
            global_limit=effective.global_limit,
            global_buffer=effective.global_buffer,
            per_user_limit=effective.per_user_limit,
            global_usage=global_usage,
            global_remaining=max(0, effective.global_threshold - global_usage),
            users_char_count=sum(record.char_count for record in usage_records),
        )

        logger.info(
            "Statistics generated",
            extra={"period": period, "users": len(rows), "global_usage": global_usage},
        )
        return StatisticsResponse(period=period, contingent=summary, users=rows)
