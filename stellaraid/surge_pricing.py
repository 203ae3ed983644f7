"""Detection of surge pricing and fee trends on the network."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum

from .fee_errors import InvalidFeeValueError


@dataclass
class SurgePricingConfig:
    """Thresholds used to classify the current base fee."""

    normal_base_fee: int = 100
    warn_threshold_percent: float = 150.0
    critical_threshold_percent: float = 300.0
    window_size: int = 10


class SurgePricingLevel(Enum):
    """How far the current fee is above the normal fee."""

    NORMAL = "Normal"
    ELEVATED = "Elevated"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def label(self) -> str:
        """User-facing name of the level."""
        return self.value

    @property
    def description(self) -> str:
        """Short explanation of the level for users."""
        return _DESCRIPTIONS[self]

    @property
    def recommendation(self) -> str:
        """Advice for users at this level."""
        return _RECOMMENDATIONS[self]


_DESCRIPTIONS = {
    SurgePricingLevel.NORMAL: "Network fees are normal",
    SurgePricingLevel.ELEVATED: "Network is slightly congested",
    SurgePricingLevel.HIGH: "Network is congested",
    SurgePricingLevel.CRITICAL: "Network is congested - high fees",
}

_RECOMMENDATIONS = {
    SurgePricingLevel.NORMAL: "Fees are normal. Safe to proceed.",
    SurgePricingLevel.ELEVATED: "Network is slightly congested. Fees are slightly elevated.",
    SurgePricingLevel.HIGH: "Network is congested. Consider waiting if not urgent.",
    SurgePricingLevel.CRITICAL: (
        "Network has critical congestion. Wait for fees to decrease if possible."
    ),
}


class FeeTrend(Enum):
    """Direction in which fees are moving."""

    INCREASING = "Increasing"
    STABLE = "Stable"
    DECREASING = "Decreasing"

    @property
    def emoji(self) -> str:
        """Pictogram for the trend."""
        return _EMOJI[self]


_EMOJI = {
    FeeTrend.INCREASING: "📈",
    FeeTrend.STABLE: "➡️",
    FeeTrend.DECREASING: "📉",
}


@dataclass(frozen=True)
class SurgePricingAnalysis:
    """Result of analysing one observed base fee."""

    surge_level: SurgePricingLevel
    is_surge: bool
    surge_percent: float
    current_fee: int
    normal_fee: int
    trend: FeeTrend
    recommendation: str


class SurgePricingAnalyzer:
    """Classifies base fees and tracks a window of recent observations."""

    def __init__(self, config: SurgePricingConfig | None = None) -> None:
        self.config = config if config is not None else SurgePricingConfig()
        self._fee_history: deque[int] = deque(maxlen=max(self.config.window_size, 0))

    def analyze(self, current_base_fee: int) -> SurgePricingAnalysis:
        """Record a fee and report its surge level and the current trend."""
        if current_base_fee < 0:
            raise InvalidFeeValueError("base fee cannot be negative")

        self._fee_history.append(current_base_fee)

        normal = self.config.normal_base_fee
        surge_percent = current_base_fee / normal * 100.0 if normal > 0 else 100.0

        level = self.detect_level(surge_percent)
        return SurgePricingAnalysis(
            surge_level=level,
            is_surge=level is not SurgePricingLevel.NORMAL,
            surge_percent=surge_percent,
            current_fee=current_base_fee,
            normal_fee=normal,
            trend=self._calculate_trend(),
            recommendation=level.recommendation,
        )

    def detect_level(self, surge_percent: float) -> SurgePricingLevel:
        """Map a surge percentage onto a level."""
        if surge_percent >= self.config.critical_threshold_percent:
            return SurgePricingLevel.CRITICAL
        if surge_percent >= self.config.warn_threshold_percent:
            return SurgePricingLevel.HIGH
        if surge_percent > 100.0:
            return SurgePricingLevel.ELEVATED
        return SurgePricingLevel.NORMAL

    def _calculate_trend(self) -> FeeTrend:
        fees = list(self._fee_history)
        if len(fees) < 2:
            return FeeTrend.STABLE
        half = len(fees) // 2
        older, recent = fees[:half], fees[half:]
        older_avg = sum(older) / len(older)
        recent_avg = sum(recent) / len(recent)
        if older_avg == 0:
            return FeeTrend.INCREASING if recent_avg > 0 else FeeTrend.STABLE
        percent_change = (recent_avg - older_avg) / older_avg * 100.0
        if percent_change > 10.0:
            return FeeTrend.INCREASING
        if percent_change < -10.0:
            return FeeTrend.DECREASING
        return FeeTrend.STABLE

    def reset_history(self) -> None:
        """Forget all observed fees."""
        self._fee_history.clear()

    def average_fee(self) -> float | None:
        """Mean of the observed fees, if any."""
        if not self._fee_history:
            return None
        return sum(self._fee_history) / len(self._fee_history)

    def max_fee(self) -> int | None:
        """Highest observed fee, if any."""
        return max(self._fee_history, default=None)

    def min_fee(self) -> int | None:
        """Lowest observed fee, if any."""
        return min(self._fee_history, default=None)