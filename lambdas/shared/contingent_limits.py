"""Static contingent limit configuration."""

from dataclasses import dataclass

from .utils import env_int


@dataclass(frozen=True)
class ContingentLimits:
    """Fallback character limits for the monthly contingent.

    Used whenever the period's stored contingent config does not carry a
    value. Counters reset implicitly at each calendar month boundary.
    """

    # Per-user monthly limit (characters x target languages)
    PER_USER_MONTHLY_CHARS: int = 10_000

    # Global monthly limit (all users combined)
    GLOBAL_MONTHLY_CHARS: int = 500_000

    # Headroom subtracted from the global limit
    # Absorbs in-flight requests that raced the check
    GLOBAL_BUFFER_CHARS: int = 5_000

    # Warning threshold (log warning at this % of the global threshold)
    WARNING_THRESHOLD: float = 0.8

    @classmethod
    def from_env(cls) -> "ContingentLimits":
        """Load deploy-time overrides from environment variables.

        Returns:
            ContingentLimits with any configured overrides applied

        Raises:
            ConfigurationError: If an override is not an integer
        """
        defaults = cls()
        return cls(
            PER_USER_MONTHLY_CHARS=env_int(
                "CONTINGENT_PER_USER_MONTHLY_CHARS", defaults.PER_USER_MONTHLY_CHARS
            ),
            GLOBAL_MONTHLY_CHARS=env_int(
                "CONTINGENT_GLOBAL_MONTHLY_CHARS", defaults.GLOBAL_MONTHLY_CHARS
            ),
            GLOBAL_BUFFER_CHARS=env_int(
                "CONTINGENT_GLOBAL_BUFFER_CHARS", defaults.GLOBAL_BUFFER_CHARS
            ),
        )
