"""
Leaderboard storage for analysis results.

Keeps the latest result per subject in a JSON file and serves previously
computed scores back for annotating review pairs.
"""

import json
import logging
import os
from dataclasses import asdict
from datetime import datetime
from threading import Lock
from typing import Dict, List, Optional

from .models import AnalysisResult, RiskLevel

DEFAULT_LEADERBOARD_FILE = "r4r_leaderboard.json"

SORTABLE_FIELDS = (
    'farming_score',
    'reviews_received',
    'reviews_given',
    'reciprocal_reviews',
    'avg_reciprocal_time',
    'last_analyzed',
)


class LeaderboardStore:
    """Persists one leaderboard entry per subject, keyed by userkey."""

    def __init__(self, store_path: str = DEFAULT_LEADERBOARD_FILE):
        """
        Initialize the store.

        Args:
            store_path: Path to the leaderboard JSON file
        """
        self.store_path = store_path
        self.entries_by_userkey: Dict[str, Dict] = {}
        self._lock = Lock()
        self._load()

    def _load(self) -> None:
        """Load existing entries from file if it exists."""
        if not os.path.exists(self.store_path):
            logging.info(f"No existing leaderboard found at {self.store_path}")
            return

        try:
            with open(self.store_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.entries_by_userkey = data.get('entries', {})
            logging.info(f"Loaded leaderboard with {len(self.entries_by_userkey)} entries")
        except (json.JSONDecodeError, OSError, AttributeError) as e:
            logging.warning(f"Could not load leaderboard from {self.store_path}: {e}")
            self.entries_by_userkey = {}

    def _save(self) -> None:
        try:
            with open(self.store_path, 'w', encoding='utf-8') as f:
                json.dump({'entries': self.entries_by_userkey}, f, indent=2, ensure_ascii=False)
            logging.debug(f"Saved leaderboard with {len(self.entries_by_userkey)} entries")
        except OSError as e:
            logging.error(f"Could not save leaderboard to {self.store_path}: {e}")

    def save_result(self, result: AnalysisResult) -> Dict:
        """
        Insert or replace the entry for the result's subject.

        Returns:
            The stored entry
        """
        subject = result.subject
        now = datetime.now().isoformat()

        with self._lock:
            previous = self.entries_by_userkey.get(subject.userkey, {})
            entry = {
                'userkey': subject.userkey,
                'username': subject.username,
                'name': subject.name,
                'avatar': subject.avatar,
                'ethos_score': subject.score,
                'ethos_xp': subject.xp,
                'reviews_given': result.given,
                'reviews_received': result.received,
                'reciprocal_reviews': result.reciprocal,
                'farming_score': result.final_score,
                'risk_level': result.risk_level.value,
                'quick_reciprocations': result.quick_reciprocations,
                'avg_reciprocal_time': round(result.avg_reciprocal_time_days, 4),
                'score_breakdown': asdict(result.score_breakdown),
                'analysis_version': result.analysis_version,
                'processing_time': result.processing_time_ms,
                'last_analyzed': result.analyzed_at.isoformat(),
                'created_at': previous.get('created_at', now),
                'updated_at': now,
            }
            self.entries_by_userkey[subject.userkey] = entry
            self._save()

        logging.info(f"Saved analysis for {subject.display_name} ({entry['farming_score']}% R4R score)")
        return entry

    def get_entry(self, userkey: str) -> Optional[Dict]:
        with self._lock:
            entry = self.entries_by_userkey.get(userkey)
            return dict(entry) if entry else None

    def get_scores(self) -> Dict[str, int]:
        """
        Map each stored subject's username (or userkey, when it has none) to its last final score.

        Returns:
            Dictionary of identity -> farming score
        """
        with self._lock:
            return {
                (entry.get('username') or userkey): entry['farming_score']
                for userkey, entry in self.entries_by_userkey.items()
                if entry.get('farming_score') is not None
            }

    def entries(self, sort_by: str = 'farming_score', descending: bool = True,
                risk_level: Optional[RiskLevel] = None) -> List[Dict]:
        """
        Return stored entries, optionally filtered by risk level.

        Args:
            sort_by: One of SORTABLE_FIELDS (falls back to farming_score)
            descending: Sort order
            risk_level: Only return entries at this level
        """
        if sort_by not in SORTABLE_FIELDS:
            logging.warning(f"Invalid sort field '{sort_by}', using 'farming_score'")
            sort_by = 'farming_score'

        with self._lock:
            entries = [dict(entry) for entry in self.entries_by_userkey.values()]

        if risk_level is not None:
            entries = [entry for entry in entries if entry.get('risk_level') == risk_level.value]

        # Entries without the field sort after the others
        present = [entry for entry in entries if entry.get(sort_by) is not None]
        missing = [entry for entry in entries if entry.get(sort_by) is None]
        return sorted(present, key=lambda entry: entry[sort_by], reverse=descending) + missing

    def stats(self) -> Dict:
        """Summary counts for the stored entries."""
        with self._lock:
            entries = list(self.entries_by_userkey.values())

        scores = [entry['farming_score'] for entry in entries if entry.get('farming_score') is not None]
        updated = [entry['updated_at'] for entry in entries if entry.get('updated_at')]
        return {
            'total_entries': len(entries),
            'high_risk': sum(1 for entry in entries if entry.get('risk_level') == RiskLevel.HIGH.value),
            'moderate_risk': sum(1 for entry in entries if entry.get('risk_level') == RiskLevel.MODERATE.value),
            'low_risk': sum(1 for entry in entries if entry.get('risk_level') == RiskLevel.LOW.value),
            'average_score': round(sum(scores) / len(scores), 2) if scores else 0,
            'last_updated': max(updated) if updated else None,
        }

    def clear(self) -> int:
        """
        Remove all entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = len(self.entries_by_userkey)
            self.entries_by_userkey = {}
            self._save()
        logging.info(f"Cleared {removed} leaderboard entries")
        return removed
