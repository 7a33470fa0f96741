"""R4R Analyzer - detects review-for-review farming on the Ethos network."""

from .models import (ActivityRecord, AnalysisResult, BatchItem, Counterpart, Direction, Rating,
                     ReviewPair, RiskLevel, ScoreBreakdown, Subject)
from .normalizer import normalize_activities, filter_active, parse_timestamp, resolve_rating
from .pairing import pair_reviews
from .timing import QUICK_RECIPROCATION_THRESHOLD_DAYS, analyze_timing
from .scoring import SCORING_VERSIONS, DEFAULT_SCORING_VERSION, ScoringConstants, calculate_score, get_scoring_constants
from .assembler import build_analysis_result, annotate_counterpart_scores
from .api_client import EthosAPIClient, ActivityFetchError
from .cache import CacheManager
from .store import LeaderboardStore
from .analyzer import R4RAnalyzer, AnalysisError, subject_from_input
from .export import write_batch_csv
from .output import OutputFormatter

__all__ = [
    'ActivityRecord',
    'AnalysisResult',
    'BatchItem',
    'Counterpart',
    'Direction',
    'Rating',
    'ReviewPair',
    'RiskLevel',
    'ScoreBreakdown',
    'Subject',
    'normalize_activities',
    'filter_active',
    'parse_timestamp',
    'resolve_rating',
    'pair_reviews',
    'QUICK_RECIPROCATION_THRESHOLD_DAYS',
    'analyze_timing',
    'SCORING_VERSIONS',
    'DEFAULT_SCORING_VERSION',
    'ScoringConstants',
    'calculate_score',
    'get_scoring_constants',
    'build_analysis_result',
    'annotate_counterpart_scores',
    'EthosAPIClient',
    'ActivityFetchError',
    'CacheManager',
    'LeaderboardStore',
    'R4RAnalyzer',
    'AnalysisError',
    'subject_from_input',
    'write_batch_csv',
    'OutputFormatter',
]
