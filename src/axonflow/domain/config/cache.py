"""Cache policy model."""

from pydantic import BaseModel, ConfigDict, Field


class CachePolicy(BaseModel):
    """Configuration for the response cache.

    Attributes:
        enabled: Whether responses are cached
        ttl: Entry lifetime in seconds
        max_entries: Maximum number of cached entries
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    ttl: float = Field(60.0, ge=0.0)
    max_entries: int = Field(1000, ge=1)

    @classmethod
    def defaults(cls) -> "CachePolicy":
        return cls()

    @classmethod
    def disabled(cls) -> "CachePolicy":
        return cls(enabled=False)
