"""Retry policy model."""

from pydantic import BaseModel, ConfigDict, Field


class RetryPolicy(BaseModel):
    """Configuration for retry logic.

    Attributes:
        enabled: Whether failed calls are retried at all
        max_attempts: Maximum number of attempts, first call included (1-10)
        initial_delay: Delay in seconds before the second attempt
        max_delay: Upper bound in seconds for any single delay
        multiplier: Exponential backoff multiplier
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    max_attempts: int = Field(3, ge=1, le=10)
    initial_delay: float = Field(1.0, ge=0.0)  # Allow 0 for tests
    max_delay: float = Field(30.0, ge=0.0)
    multiplier: float = Field(2.0, ge=1.0)

    @classmethod
    def defaults(cls) -> "RetryPolicy":
        return cls()

    @classmethod
    def disabled(cls) -> "RetryPolicy":
        return cls(enabled=False)

    def delay_for_attempt(self, attempt: int) -> float:
        """Backoff delay for a 1-based attempt number, in seconds.

        The executor waits ``delay_for_attempt(n)`` after attempt ``n`` fails,
        so with the defaults the waits before attempts 2, 3 and 4 are 1s, 2s, 4s.
        """
        if attempt <= 1:
            return self.initial_delay
        return min(self.initial_delay * self.multiplier ** (attempt - 1), self.max_delay)
