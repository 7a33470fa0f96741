"""Rule-based R4R risk scoring.

The formula is a pure function of a handful of counts and a constants table.
Each table carries a version identifier that is stamped on every result, so a
stored score can always be traced back to the constants that produced it.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional, Tuple

from .models import RiskLevel, ScoreBreakdown
from .timing import QUICK_RECIPROCATION_THRESHOLD_DAYS


@dataclass(frozen=True)
class VolumeTier:
    min_reciprocal: int
    multiplier: float
    label: str


@dataclass(frozen=True)
class AccountAgeTier:
    min_reviews_per_day: float  # exclusive
    max_account_age_days: float  # exclusive
    multiplier: float
    label: str


@dataclass(frozen=True)
class TimePenaltyTier:
    min_ratio: float
    min_quick: int
    base: float
    ratio_weight: float
    label: str


@dataclass(frozen=True)
class ScoringConstants:
    """One version of the scoring formula."""
    version: str
    base_cap: float
    volume_tiers: Tuple[VolumeTier, ...]
    account_age_tiers: Tuple[AccountAgeTier, ...]
    time_penalty_tiers: Tuple[TimePenaltyTier, ...]
    quick_threshold_days: float
    min_reciprocal_for_penalty: int
    quick_threshold_inclusive: bool = False  # gap == threshold counts as quick
    high_risk_score: int = 70
    moderate_risk_score: int = 40


_VOLUME_TIERS = (
    VolumeTier(50, 1.20, "Very high volume (≥50 reciprocals)"),
    VolumeTier(20, 1.15, "High volume (20-49 reciprocals)"),
    VolumeTier(10, 1.05, "Moderate volume (10-19 reciprocals)"),
)

_ACCOUNT_AGE_TIERS = (
    AccountAgeTier(10, 30, 1.40, "Very high activity"),
    AccountAgeTier(5, 60, 1.25, "High activity"),
    AccountAgeTier(2, 90, 1.10, "Moderate activity"),
)

# Earlier batch formula: no base cap, flat penalties, and gaps of up to 24 hours
# (inclusive) count as quick. Pairing and integer rounding are shared with v2,
# so scores differ from the ones the earlier batch job stored.
SCORING_V1_COMPAT = ScoringConstants(
    version='v1-compat',
    base_cap=100.0,
    volume_tiers=_VOLUME_TIERS,
    account_age_tiers=_ACCOUNT_AGE_TIERS,
    time_penalty_tiers=(
        TimePenaltyTier(0.8, 0, 12.5, 0.0, "Major penalty"),
        TimePenaltyTier(0.6, 0, 10.0, 0.0, "High penalty"),
        TimePenaltyTier(0.4, 0, 6.5, 0.0, "Moderate penalty"),
        TimePenaltyTier(0.2, 0, 3.0, 0.0, "Small penalty"),
    ),
    quick_threshold_days=1.0,
    min_reciprocal_for_penalty=1,
    quick_threshold_inclusive=True,
)

SCORING_V2 = ScoringConstants(
    version='v2',
    base_cap=65.0,
    volume_tiers=_VOLUME_TIERS,
    account_age_tiers=_ACCOUNT_AGE_TIERS,
    time_penalty_tiers=(
        TimePenaltyTier(0.8, 3, 10.0, 5.0, "Major penalty"),
        TimePenaltyTier(0.6, 3, 8.0, 4.0, "High penalty"),
        TimePenaltyTier(0.4, 2, 5.0, 3.0, "Moderate penalty"),
        TimePenaltyTier(0.2, 2, 2.0, 2.0, "Small penalty"),
    ),
    quick_threshold_days=QUICK_RECIPROCATION_THRESHOLD_DAYS,
    min_reciprocal_for_penalty=2,
)

SCORING_VERSIONS: Dict[str, ScoringConstants] = {
    SCORING_V1_COMPAT.version: SCORING_V1_COMPAT,
    SCORING_V2.version: SCORING_V2,
}

DEFAULT_SCORING_VERSION = SCORING_V2.version


def get_scoring_constants(version: str = DEFAULT_SCORING_VERSION) -> ScoringConstants:
    """Look up a formula version.

    Raises:
        ValueError: If the version is not known
    """
    try:
        return SCORING_VERSIONS[version]
    except KeyError:
        raise ValueError(
            f"Unknown scoring version '{version}'. Valid versions: {', '.join(sorted(SCORING_VERSIONS))}"
        ) from None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_base_score(reciprocal: int, received: int, constants: ScoringConstants = SCORING_V2) -> float:
    """Reciprocal share of received reviews as a percentage, capped at base_cap."""
    if received <= 0:
        return 0.0
    return min((reciprocal / received) * 100, constants.base_cap)


def compute_volume_multiplier(reciprocal: int, constants: ScoringConstants = SCORING_V2) -> Tuple[float, str]:
    for tier in constants.volume_tiers:
        if reciprocal >= tier.min_reciprocal:
            return tier.multiplier, tier.label
    lowest = min((tier.min_reciprocal for tier in constants.volume_tiers), default=0)
    return 1.0, f"Low volume (<{lowest} reciprocals)"


def compute_account_age(earliest: Optional[datetime], total_reviews: int, now: datetime) -> Tuple[float, float]:
    """Estimate account age from the earliest review and derive the review rate.

    Returns:
        Tuple of (account_age_days, reviews_per_day); both 0 when no timestamp is usable
    """
    if earliest is None:
        return 0.0, 0.0
    account_age_days = (now - earliest).total_seconds() / 86400
    reviews_per_day = total_reviews / max(account_age_days, 1)
    return account_age_days, reviews_per_day


def compute_account_age_multiplier(account_age_days: float, reviews_per_day: float,
                                   has_timestamps: bool = True,
                                   constants: ScoringConstants = SCORING_V2) -> Tuple[float, str]:
    if not has_timestamps:
        return 1.0, "No reviews to analyze"
    for tier in constants.account_age_tiers:
        if reviews_per_day > tier.min_reviews_per_day and account_age_days < tier.max_account_age_days:
            return tier.multiplier, (
                f"{tier.label}: {reviews_per_day:.1f} reviews/day on {account_age_days:.0f}-day account"
            )
    return 1.0, "Normal activity rate"


def compute_time_penalty(reciprocal: int, quick: int,
                         constants: ScoringConstants = SCORING_V2) -> Tuple[float, float, str]:
    """Penalty for a high share of quick reciprocations.

    Returns:
        Tuple of (penalty, quick_ratio, reason)
    """
    ratio = quick / reciprocal if reciprocal > 0 else 0.0
    if reciprocal < constants.min_reciprocal_for_penalty:
        return 0.0, ratio, "No time penalty"

    for tier in constants.time_penalty_tiers:
        if ratio >= tier.min_ratio and quick >= tier.min_quick:
            penalty = tier.base + ratio * tier.ratio_weight
            return penalty, ratio, (
                f"{tier.label}: {ratio * 100:.0f}% quick reciprocals (≥{tier.min_ratio * 100:.0f}%)"
            )
    return 0.0, ratio, "No time penalty"


def risk_level_for(final_score: int, constants: ScoringConstants = SCORING_V2) -> RiskLevel:
    if final_score >= constants.high_risk_score:
        return RiskLevel.HIGH
    if final_score >= constants.moderate_risk_score:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def calculate_score(
    reciprocal: int,
    received: int,
    quick: int,
    total_reviews: int,
    earliest: Optional[datetime],
    now: datetime,
    constants: ScoringConstants = SCORING_V2
) -> ScoreBreakdown:
    """Run all scoring stages and return the full breakdown.

    Args:
        reciprocal: Number of reciprocal (positive/positive) pairs
        received: Number of non-archived received reviews
        quick: Number of reciprocal pairs reciprocated below the quick threshold
        total_reviews: Non-archived given plus received reviews
        earliest: Earliest valid review timestamp, None if there is none
        now: Reference instant for the account age estimate
        constants: Formula version to apply

    Returns:
        ScoreBreakdown with every intermediate value
    """
    base_score = compute_base_score(reciprocal, received, constants)
    volume_multiplier, volume_reason = compute_volume_multiplier(reciprocal, constants)

    account_age_days, reviews_per_day = compute_account_age(earliest, total_reviews, now)
    account_age_multiplier, account_age_reason = compute_account_age_multiplier(
        account_age_days, reviews_per_day, earliest is not None, constants
    )

    score_after_multipliers = base_score * volume_multiplier * account_age_multiplier
    time_penalty, quick_ratio, time_penalty_reason = compute_time_penalty(reciprocal, quick, constants)

    final_score = round_half_up(min(score_after_multipliers + time_penalty, 100))
    final_score = max(0, min(final_score, 100))

    return ScoreBreakdown(
        base_score=base_score,
        volume_multiplier=volume_multiplier,
        account_age_multiplier=account_age_multiplier,
        score_after_multipliers=score_after_multipliers,
        time_penalty=time_penalty,
        final_score=final_score,
        account_age_days=account_age_days,
        reviews_per_day=reviews_per_day,
        quick_ratio=quick_ratio,
        volume_reason=volume_reason,
        account_age_reason=account_age_reason,
        time_penalty_reason=time_penalty_reason,
    )
