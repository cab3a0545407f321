"""Domain models for blood alcohol estimation."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

DISTRIBUTION_FACTOR_MALE = 0.68
DISTRIBUTION_FACTOR_FEMALE = 0.55
DEFAULT_BODY_WEIGHT_KG = 75.0
DEFAULT_ELIMINATION_RATE = 0.15
DEFAULT_SAMPLE_INTERVAL_MINUTES = 15


@dataclass(frozen=True)
class PhysiologyParams:
    """Widmark coefficients for a drinker."""

    body_weight_kg: float = DEFAULT_BODY_WEIGHT_KG
    distribution_factor: float = DISTRIBUTION_FACTOR_MALE
    elimination_rate_per_hour: float = DEFAULT_ELIMINATION_RATE


@dataclass(frozen=True)
class BACSample:
    """One point of a BAC time series, in permille."""

    timestamp: datetime
    bac_permille: float

    @property
    def timestamp_millis(self) -> int:
        return int(self.timestamp.timestamp() * 1000)


@dataclass(frozen=True)
class BACSeries:
    """A sampled BAC curve with the current value and sober ETA."""

    samples: list[BACSample]
    current_bac: float
    zero_bac_at: datetime | None


@dataclass(frozen=True)
class GroupBACRow:
    """Comparison row joining several users' samples."""

    timestamp: datetime
    time_label: str
    bac_by_user: dict[str, float] = field(default_factory=dict)


class BACStatus(str, Enum):
    """Display band for a BAC value."""

    SOBER = "sober"
    LIGHT = "light"
    MODERATE = "moderate"
    HIGH = "high"


class JoinKey(str, Enum):
    """How per-user series are joined for comparison charts."""

    TIMESTAMP = "timestamp"
    DISPLAY_TIME = "display_time"


@dataclass(frozen=True)
class UserBACSeries:
    """A BAC series tagged with its owner."""

    user_id: UUID
    user_name: str
    series: BACSeries
