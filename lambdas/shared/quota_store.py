"""Quota store adapter over the DynamoDB table.

Owns key construction for every quota document. All documents of one
accounting period share a partition, so a new period starts empty and
readers treat absent documents as zero counters / default config.
"""

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_NAMESPACE
from .contingent_limits import ContingentLimits
from .db import DynamoDBClient, convert_decimals
from .exceptions import StoreUnavailableError
from .models import ContingentConfig, UserIdentityRecord, UserUsageRecord
from .utils import utc_now

logger = Logger(child=True)

CONFIG_SK = "CONFIG"
GLOBAL_USAGE_SK = "GLOBAL_USAGE"
USER_SK_PREFIX = "USER#"


class QuotaStore:
    """Reads and writes contingent config, usage counters and identities.

    Every storage failure surfaces as StoreUnavailableError; callers decide
    whether a failed read may degrade to defaults.
    """

    def __init__(
        self,
        db: DynamoDBClient,
        namespace: str = DEFAULT_NAMESPACE,
        limits: ContingentLimits | None = None,
    ) -> None:
        """Initialize store.

        Args:
            db: DynamoDB client instance
            namespace: Key namespace shared by all documents
            limits: Static limits used for default configs
        """
        self.db = db
        self.namespace = namespace
        self.limits = limits or ContingentLimits()

    # Keys

    def period_pk(self, period: str) -> str:
        """Partition key of all documents in a period."""
        return f"{self.namespace}#PERIOD#{period}"

    @property
    def identities_pk(self) -> str:
        """Partition key of the (period independent) identity records."""
        return f"{self.namespace}#IDENTITIES"

    @staticmethod
    def user_sk(user_id: str) -> str:
        """Sort key of a user's usage or identity document."""
        return f"{USER_SK_PREFIX}{user_id}"

    # Contingent config

    def get_config(self, period: str) -> ContingentConfig | None:
        """Read the stored contingent config.

        Args:
            period: Accounting period (YYYY-MM)

        Returns:
            Stored config, or None if the period has none yet
        """
        item = self._call("get_config", self.db.get_item, self.period_pk(period), CONFIG_SK)
        return ContingentConfig.from_db_item(item) if item else None

    def read_config(self, period: str) -> ContingentConfig:
        """Read the contingent config, defaulting when absent.

        Args:
            period: Accounting period (YYYY-MM)

        Returns:
            Stored config, or the default config if none exists
        """
        return self.get_config(period) or ContingentConfig.defaults(self.limits)

    def ensure_config_exists(self, period: str) -> bool:
        """Create the default config for a period unless one exists.

        Uses a conditional put, so an existing config is never overwritten,
        even by concurrent callers.

        Args:
            period: Accounting period (YYYY-MM)

        Returns:
            True if this call created the config
        """
        default = ContingentConfig.defaults(self.limits, last_updated=utc_now())
        created = self._call(
            "ensure_config_exists",
            self.db.put_item_if_absent,
            self.period_pk(period),
            CONFIG_SK,
            default.model_dump(),
        )
        if created:
            logger.info("Created contingent config with default values", extra={"period": period})
        else:
            logger.debug("Contingent config already exists", extra={"period": period})
        return created

    # Usage counters

    def read_user_usage(self, user_id: str, period: str) -> UserUsageRecord:
        """Read a user's usage record, zero-valued if absent.

        Args:
            user_id: Opaque user ID
            period: Accounting period (YYYY-MM)

        Returns:
            UserUsageRecord for the period
        """
        item = self._call(
            "read_user_usage", self.db.get_item, self.period_pk(period), self.user_sk(user_id)
        )
        if not item:
            return UserUsageRecord(user_id=user_id)
        return UserUsageRecord.from_db_item({**convert_decimals(item), "user_id": user_id})

    def read_global_usage(self, period: str) -> int:
        """Read the global character counter, 0 if absent.

        Args:
            period: Accounting period (YYYY-MM)

        Returns:
            Characters translated by all users in the period
        """
        item = self._call("read_global_usage", self.db.get_item, self.period_pk(period), GLOBAL_USAGE_SK)
        return int(item.get("char_count", 0)) if item else 0

    def increment_user_usage(
        self,
        user_id: str,
        period: str,
        delta_chars: int,
        target_languages: list[str],
    ) -> int:
        """Atomically add to a user's counter and record the languages used.

        Args:
            user_id: Opaque user ID
            period: Accounting period (YYYY-MM)
            delta_chars: Characters to add
            target_languages: Last-used target languages (overwrites previous)

        Returns:
            The user's counter after the increment
        """
        attributes = self._call(
            "increment_user_usage",
            self.db.update_item,
            self.period_pk(period),
            self.user_sk(user_id),
            {
                "user_id": user_id,
                "target_languages": list(target_languages),
                "last_updated": utc_now(),
            },
            {"char_count": delta_chars},
        )
        return int(attributes.get("char_count", 0))

    def increment_global_usage(self, period: str, delta_chars: int) -> int:
        """Atomically add to the global counter.

        Args:
            period: Accounting period (YYYY-MM)
            delta_chars: Characters to add

        Returns:
            The global counter after the increment
        """
        attributes = self._call(
            "increment_global_usage",
            self.db.update_item,
            self.period_pk(period),
            GLOBAL_USAGE_SK,
            {"last_updated": utc_now()},
            {"char_count": delta_chars},
        )
        return int(attributes.get("char_count", 0))

    def list_user_usage(self, period: str) -> list[UserUsageRecord]:
        """List every user's usage record for a period."""
        items = self._call(
            "list_user_usage", self.db.query_by_pk, self.period_pk(period), USER_SK_PREFIX
        )
        return [
            UserUsageRecord.from_db_item(
                {**convert_decimals(item), "user_id": item["SK"][len(USER_SK_PREFIX):]}
            )
            for item in items
        ]

    # Identities

    def list_user_identities(self) -> list[UserIdentityRecord]:
        """List every stored user identity."""
        items = self._call(
            "list_user_identities", self.db.query_by_pk, self.identities_pk, USER_SK_PREFIX
        )
        return [UserIdentityRecord.from_db_item(convert_decimals(item)) for item in items]

    def get_user_identity(self, user_id: str) -> UserIdentityRecord | None:
        """Read one identity record, or None if the user is unknown."""
        item = self._call(
            "get_user_identity", self.db.get_item, self.identities_pk, self.user_sk(user_id)
        )
        return UserIdentityRecord.from_db_item(convert_decimals(item)) if item else None

    def upsert_user_identity(self, user_id: str, fields: dict[str, Any]) -> None:
        """Merge fields into a user's identity record, creating it if absent.

        Args:
            user_id: Opaque user ID
            fields: Attributes to set; other stored attributes are preserved
        """
        self._call(
            "upsert_user_identity",
            self.db.update_item,
            self.identities_pk,
            self.user_sk(user_id),
            fields,
        )

    def _call(self, operation: str, func, *args):
        try:
            return func(*args)
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(operation, str(e)) from e
