"""Shared contingent accounting core for the translation Lambda functions."""

from .config import Config
from .contingent_limits import ContingentLimits
from .contingent_policy import (
    ContingentGuard,
    ContingentSnapshot,
    ContingentStatus,
    evaluate_contingent,
    is_exceeded,
)
from .db import DynamoDBClient
from .enforcement import EnforcementCoordinator, OptimisticDecision
from .exceptions import (
    ConfigurationError,
    InvalidRequestError,
    QuotaExceededError,
    StoreUnavailableError,
    TranslationAppError,
    TranslationProviderError,
)
from .models import (
    ContingentConfig,
    DeviceInfo,
    PrivilegedDevice,
    UserIdentityRecord,
    UserKind,
    UserUsageRecord,
)
from .period import current_period
from .quota_store import QuotaStore
from .usage_recorder import UsageRecorder

__all__ = [
    # Config
    "Config",
    "ContingentLimits",
    # Database
    "DynamoDBClient",
    "QuotaStore",
    # Contingent
    "ContingentGuard",
    "ContingentSnapshot",
    "ContingentStatus",
    "EnforcementCoordinator",
    "OptimisticDecision",
    "UsageRecorder",
    "current_period",
    "evaluate_contingent",
    "is_exceeded",
    # Exceptions
    "ConfigurationError",
    "InvalidRequestError",
    "QuotaExceededError",
    "StoreUnavailableError",
    "TranslationAppError",
    "TranslationProviderError",
    # Models
    "ContingentConfig",
    "DeviceInfo",
    "PrivilegedDevice",
    "UserIdentityRecord",
    "UserKind",
    "UserUsageRecord",
]
