"""Timing analysis of review pairs."""

from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from .models import ActivityRecord, ReviewPair

SECONDS_PER_DAY = 86400

# 30 minutes
QUICK_RECIPROCATION_THRESHOLD_DAYS = 1 / 48


def time_difference_days(first: Optional[ActivityRecord], second: Optional[ActivityRecord]) -> Optional[float]:
    """Absolute gap between two records in days.

    Returns:
        The gap, or None when either record is missing or has an invalid timestamp
    """
    if first is None or second is None:
        return None
    if not first.has_valid_timestamp or not second.has_valid_timestamp:
        return None
    return abs((first.timestamp - second.timestamp).total_seconds()) / SECONDS_PER_DAY


def is_quick_reciprocation(gap_days: Optional[float],
                           threshold_days: float = QUICK_RECIPROCATION_THRESHOLD_DAYS,
                           inclusive: bool = False) -> bool:
    """A gap counts as quick if it is below the threshold (or equal to it, when inclusive)."""
    if gap_days is None:
        return False
    if inclusive:
        return gap_days <= threshold_days
    return gap_days < threshold_days


def analyze_timing(pairs: Iterable[ReviewPair],
                   threshold_days: float = QUICK_RECIPROCATION_THRESHOLD_DAYS,
                   inclusive: bool = False) -> List[ReviewPair]:
    """Fill in time differences and quick flags for every pair with both sides.

    Only reciprocal pairs can be flagged quick; a fast one-way exchange
    (e.g. a negative answer to a positive review) is not suspicious.
    """
    analyzed = []
    for pair in pairs:
        gap = time_difference_days(pair.given_record, pair.received_record)
        analyzed.append(replace(
            pair,
            time_difference_days=gap,
            is_quick=pair.is_reciprocal and is_quick_reciprocation(gap, threshold_days, inclusive),
        ))
    return analyzed


def count_quick_reciprocations(pairs: Iterable[ReviewPair]) -> int:
    return sum(1 for pair in pairs if pair.is_reciprocal and pair.is_quick)


def average_reciprocal_time_days(pairs: Iterable[ReviewPair]) -> float:
    """Mean gap over reciprocal pairs with a measurable gap, 0 if there are none."""
    gaps = [pair.time_difference_days for pair in pairs
            if pair.is_reciprocal and pair.time_difference_days is not None]
    if not gaps:
        return 0.0
    return sum(gaps) / len(gaps)


def earliest_timestamp(records: Iterable[ActivityRecord]) -> Optional[datetime]:
    """Earliest valid timestamp among the records, ignoring unparseable ones."""
    timestamps = [record.timestamp for record in records if record.has_valid_timestamp]
    return min(timestamps) if timestamps else None
