"""Assembly of a complete AnalysisResult from one subject's activity streams."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from .models import ActivityRecord, AnalysisResult, Subject
from .normalizer import filter_active
from .pairing import pair_reviews
from .scoring import DEFAULT_SCORING_VERSION, ScoringConstants, calculate_score, get_scoring_constants, risk_level_for
from .timing import analyze_timing, average_reciprocal_time_days, count_quick_reciprocations, earliest_timestamp


def build_analysis_result(
    subject: Subject,
    given_records: Sequence[ActivityRecord],
    received_records: Sequence[ActivityRecord],
    now: Optional[datetime] = None,
    constants: Optional[ScoringConstants] = None
) -> AnalysisResult:
    """Pair, time and score one subject's reviews.

    This is a pure function of its arguments: with the same records and the
    same `now`, it always produces an identical result.

    Args:
        subject: Profile being analyzed
        given_records: Normalized reviews the subject gave (archived ones are dropped here)
        received_records: Normalized reviews the subject received
        now: Reference instant for the account age estimate (defaults to the current UTC time;
            a naive value is taken as UTC)
        constants: Formula version (defaults to the current version)

    Returns:
        The assembled AnalysisResult
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    constants = constants or get_scoring_constants(DEFAULT_SCORING_VERSION)

    given = filter_active(given_records)
    received = filter_active(received_records)

    pairs = analyze_timing(pair_reviews(given, received), constants.quick_threshold_days,
                           constants.quick_threshold_inclusive)
    reciprocal = sum(1 for pair in pairs if pair.is_reciprocal)
    quick = count_quick_reciprocations(pairs)

    breakdown = calculate_score(
        reciprocal=reciprocal,
        received=len(received),
        quick=quick,
        total_reviews=len(given) + len(received),
        earliest=earliest_timestamp(list(given) + list(received)),
        now=now,
        constants=constants,
    )

    logging.debug(
        f"Scored {subject.display_name}: {len(given)} given, {len(received)} received, "
        f"{reciprocal} reciprocal, {quick} quick -> {breakdown.final_score}"
    )

    return AnalysisResult(
        subject=subject,
        given=len(given),
        received=len(received),
        reciprocal=reciprocal,
        quick_reciprocations=quick,
        avg_reciprocal_time_days=average_reciprocal_time_days(pairs),
        pairs=pairs,
        score_breakdown=breakdown,
        risk_level=risk_level_for(breakdown.final_score, constants),
        analysis_version=constants.version,
        analyzed_at=now,
    )


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def annotate_counterpart_scores(result: AnalysisResult, scores: Dict[str, int]) -> AnalysisResult:
    """Attach previously computed counterpart scores to the pairs, for display.

    Counterparts missing from `scores` stay unknown (None). The subject's own
    score is not touched.
    """
    pairs = [
        replace(pair, counterpart_risk_score=scores.get(pair.counterpart_identity))
        for pair in result.pairs
    ]
    return replace(result, pairs=pairs)
