"""Best-effort usage accounting for translations."""

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit

from .exceptions import StoreUnavailableError
from .quota_store import QuotaStore

logger = Logger(child=True)
metrics = Metrics(namespace="MultiLangTranslate")


def text_length(text: str) -> int:
    """Length of text in UTF-16 code units.

    Characters outside the Basic Multilingual Plane (most emoji) count as
    two, matching how the client app measures and limits input.
    """
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def translation_cost(text: str, target_languages: list[str]) -> int:
    """Characters charged for a request: text length x target languages."""
    return text_length(text) * len(target_languages)


class UsageRecorder:
    """Charges translated characters to the user and global counters."""

    def __init__(self, store: QuotaStore):
        """Initialize recorder.

        Args:
            store: Quota store holding the counters
        """
        self.store = store

    def record_translation(
        self,
        user_id: str,
        period: str,
        text: str,
        target_languages: list[str],
    ) -> None:
        """Increment the user and global counters by the request's cost.

        The two increments are independent: a failure in one is logged and
        does not block the other or the caller.

        Args:
            user_id: Opaque user ID. Nothing is recorded if empty.
            period: Accounting period (YYYY-MM)
            text: Translated source text
            target_languages: Languages the text was translated into
        """
        if not user_id:
            return

        cost = translation_cost(text, target_languages)
        logger.info(
            "Recording translation usage",
            extra={
                "user_id": user_id,
                "period": period,
                "cost": cost,
                "target_languages": target_languages,
            },
        )

        try:
            self.store.increment_user_usage(user_id, period, cost, target_languages)
        except StoreUnavailableError as e:
            logger.error(
                "Failed to record user usage",
                extra={"user_id": user_id, "period": period, "cost": cost, "error": e.message},
            )
            metrics.add_metric(name="UsageRecordFailures", unit=MetricUnit.Count, value=1)

        try:
            self.store.increment_global_usage(period, cost)
        except StoreUnavailableError as e:
            logger.error(
                "Failed to record global usage",
                extra={"period": period, "cost": cost, "error": e.message},
            )
            metrics.add_metric(name="UsageRecordFailures", unit=MetricUnit.Count, value=1)

        metrics.add_metric(name="CharsTranslated", unit=MetricUnit.Count, value=cost)
