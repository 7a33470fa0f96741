"""Main R4R analyzer."""

import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from ..api_client import DEFAULT_ACTIVITY_LIMIT, DEFAULT_API_URL, EthosAPIClient
from ..assembler import build_analysis_result
from ..cache import CacheManager, DEFAULT_CACHE_FILE
from ..models import AnalysisResult, Direction, Subject
from ..normalizer import normalize_activities
from ..scoring import DEFAULT_SCORING_VERSION, get_scoring_constants
from ..store import LeaderboardStore

# Ethos userkey for a profile known only by its X (Twitter) handle
USERNAME_USERKEY_PREFIX = 'service:x.com:username:'


class AnalysisError(Exception):
    """Raised when a subject cannot be analyzed because its review data could not be loaded."""

    def __init__(self, subject: Subject, message: str, direction: Optional[Direction] = None):
        self.subject = subject
        self.direction = direction
        super().__init__(message)


def subject_from_input(value: str) -> Subject:
    """Build a Subject from a userkey or a bare username."""
    value = value.strip().lstrip('@')
    if ':' in value:
        username = value[len(USERNAME_USERKEY_PREFIX):] if value.startswith(USERNAME_USERKEY_PREFIX) else ''
        return Subject(userkey=value, username=username)
    return Subject(userkey=f"{USERNAME_USERKEY_PREFIX}{value}", username=value)


class R4RAnalyzer:
    """Fetches a subject's review activity and scores it for review-for-review farming."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        cache_file: str = DEFAULT_CACHE_FILE,
        use_cache: bool = True,
        cache_max_age_hours: Optional[float] = 6,
        activity_limit: int = DEFAULT_ACTIVITY_LIMIT,
        scoring_version: str = DEFAULT_SCORING_VERSION,
        store: LeaderboardStore = None,
        api_client: EthosAPIClient = None,
        clock: Callable[[], datetime] = None
    ):
        """Initialize the analyzer.

        Args:
            api_url: Ethos API base URL
            cache_file: Path to the response cache file
            use_cache: Whether to cache activity responses
            cache_max_age_hours: Cache expiry in hours
            activity_limit: Maximum records fetched per direction
            scoring_version: Formula version to score with
            store: Leaderboard store for saving results and annotating pairs (optional)
            api_client: Pre-built API client (mainly for tests)
            clock: Returns the reference instant for account age estimates
        """
        self.constants = get_scoring_constants(scoring_version)
        self.cache_manager = CacheManager(cache_file, use_cache, cache_max_age_hours)
        self.api_client = api_client or EthosAPIClient(api_url, self.cache_manager)
        self.activity_limit = activity_limit
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        logging.info(f"Initialized R4R analyzer (scoring {self.constants.version}, limit {activity_limit})")

    def analyze_subject(self, subject: Subject) -> AnalysisResult:
        """Analyze one subject.

        Args:
            subject: Profile to analyze

        Returns:
            The analysis result, annotated with counterpart scores when a store is set

        Raises:
            AnalysisError: If either activity stream could not be loaded
        """
        start_time = time.monotonic()
        logging.info(f"Analyzing {subject.display_name}")

        given_payload, received_payload = self._fetch_activity_streams(subject)
        subject = self._resolve_subject(subject, given_payload, received_payload)

        result = build_analysis_result(
            subject,
            normalize_activities(given_payload, Direction.GIVEN),
            normalize_activities(received_payload, Direction.RECEIVED),
            now=self.clock(),
            constants=self.constants,
        )

        result = replace(
            result,
            subject=self._lookup_profile_scores(result.subject),
            processing_time_ms=int((time.monotonic() - start_time) * 1000),
        )
        result = self._annotate_pairs(result)

        logging.info(
            f"Completed {subject.display_name}: {result.final_score}% R4R score "
            f"({result.risk_level.value}, {result.processing_time_ms} ms)"
        )
        return result

    def save_cache(self):
        """Save the response cache to disk."""
        self.cache_manager.save_cache()


# Import and attach methods from submodules
from .fetching import _fetch_activity_streams, _resolve_subject, _lookup_profile_scores, _annotate_pairs
from .batch import analyze_batch

# Attach methods to class
R4RAnalyzer._fetch_activity_streams = _fetch_activity_streams
R4RAnalyzer._resolve_subject = _resolve_subject
R4RAnalyzer._lookup_profile_scores = _lookup_profile_scores
R4RAnalyzer._annotate_pairs = _annotate_pairs
R4RAnalyzer.analyze_batch = analyze_batch
