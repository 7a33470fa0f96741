"""Data models for reciprocal review analysis."""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union


class Direction(str, Enum):
    """Direction of a review relative to the subject under analysis."""
    GIVEN = 'given'
    RECEIVED = 'received'


class Rating(str, Enum):
    """Canonical review rating."""
    POSITIVE = 'positive'
    NEGATIVE = 'negative'
    NEUTRAL = 'neutral'
    UNKNOWN = 'unknown'


class RiskLevel(str, Enum):
    """Risk bucket derived from the final score."""
    LOW = 'low'
    MODERATE = 'moderate'
    HIGH = 'high'


@dataclass(frozen=True)
class Counterpart:
    """The other party of a review."""
    identity: str  # username, used as the join key
    userkey: str = ''
    name: str = ''
    avatar: str = ''
    score: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.name or self.identity


@dataclass(frozen=True)
class ActivityRecord:
    """One review event, normalized from an upstream activity payload."""
    id: str
    timestamp: Optional[datetime]  # None when the raw value could not be parsed
    archived: bool
    counterpart: Counterpart
    direction: Direction
    rating: Rating
    raw_timestamp: Union[str, int, float, None] = None

    @property
    def counterpart_identity(self) -> str:
        return self.counterpart.identity

    @property
    def has_valid_timestamp(self) -> bool:
        return self.timestamp is not None


@dataclass(frozen=True)
class ReviewPair:
    """Relationship between the subject and one counterpart."""
    counterpart: Counterpart
    given_record: Optional[ActivityRecord] = None
    received_record: Optional[ActivityRecord] = None
    is_reciprocal: bool = False
    time_difference_days: Optional[float] = None
    is_quick: bool = False
    counterpart_risk_score: Optional[int] = None  # display only; None means unknown

    @property
    def counterpart_identity(self) -> str:
        return self.counterpart.identity

    @property
    def has_both_sides(self) -> bool:
        return self.given_record is not None and self.received_record is not None


@dataclass(frozen=True)
class ScoreBreakdown:
    """Every intermediate value of the risk score, kept for auditing."""
    base_score: float = 0.0
    volume_multiplier: float = 1.0
    account_age_multiplier: float = 1.0
    score_after_multipliers: float = 0.0
    time_penalty: float = 0.0
    final_score: int = 0
    account_age_days: float = 0.0
    reviews_per_day: float = 0.0
    quick_ratio: float = 0.0
    volume_reason: str = ''
    account_age_reason: str = ''
    time_penalty_reason: str = ''


@dataclass(frozen=True)
class Subject:
    """Profile under analysis."""
    userkey: str
    username: str = ''
    name: str = ''
    avatar: str = ''
    score: Optional[float] = None  # external reputation score
    xp: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.username or self.name or self.userkey


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of analyzing one subject."""
    subject: Subject
    given: int
    received: int
    reciprocal: int
    quick_reciprocations: int
    avg_reciprocal_time_days: float
    pairs: List[ReviewPair]
    score_breakdown: ScoreBreakdown
    risk_level: RiskLevel
    analysis_version: str
    analyzed_at: datetime
    processing_time_ms: int = 0

    @property
    def final_score(self) -> int:
        return self.score_breakdown.final_score

    def to_dict(self) -> Dict:
        """Return a JSON-ready representation of the result."""
        data = asdict(self)
        data['risk_level'] = self.risk_level.value
        data['analyzed_at'] = self.analyzed_at.isoformat()
        data['pairs'] = [_pair_to_dict(pair) for pair in self.pairs]
        return data


def _record_to_dict(record: Optional[ActivityRecord]) -> Optional[Dict]:
    if record is None:
        return None
    return {
        'id': record.id,
        'timestamp': record.timestamp.isoformat() if record.timestamp else None,
        'archived': record.archived,
        'counterpart': record.counterpart_identity,
        'direction': record.direction.value,
        'rating': record.rating.value,
    }


def _pair_to_dict(pair: ReviewPair) -> Dict:
    return {
        'counterpart': asdict(pair.counterpart),
        'given_record': _record_to_dict(pair.given_record),
        'received_record': _record_to_dict(pair.received_record),
        'is_reciprocal': pair.is_reciprocal,
        'time_difference_days': pair.time_difference_days,
        'is_quick': pair.is_quick,
        'counterpart_risk_score': pair.counterpart_risk_score,
    }


@dataclass
class BatchItem:
    """One subject's row in a batch run."""
    subject: Subject
    result: Optional[AnalysisResult] = None
    status: str = 'success'
    error_message: str = ''
    discovery_method: str = 'manual'
    finished_at: datetime = field(default_factory=datetime.now)
