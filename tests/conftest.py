"""
Shared fixtures for R4R analyzer tests
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from r4r_analyzer.assembler import build_analysis_result
from r4r_analyzer.models import ActivityRecord, Counterpart, Direction, Rating, Subject

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

# Old enough that account age never raises the score
LONG_AGO = NOW - timedelta(days=200)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def subject():
    return Subject(userkey='service:x.com:username:subject_user', username='subject_user', name='Subject User')


@pytest.fixture
def make_record():
    """Factory for normalized records. Pass at=None for an invalid timestamp."""
    ids = itertools.count(1)

    def _make(counterpart, direction=Direction.GIVEN, rating=Rating.POSITIVE, at=LONG_AGO,
              archived=False, name=''):
        return ActivityRecord(
            id=f"r{next(ids)}",
            timestamp=at,
            archived=archived,
            counterpart=Counterpart(identity=counterpart, userkey=f"key:{counterpart}", name=name),
            direction=direction,
            rating=rating,
            raw_timestamp=at.isoformat() if at else 'not-a-date',
        )

    return _make


@pytest.fixture
def make_activity():
    """Factory for raw upstream activity payload entries."""
    ids = itertools.count(1)

    def _make(counterpart, direction='given', rating='positive', timestamp='2025-01-01T00:00:00Z',
              archived=False, schema='data'):
        other = {
            'userkey': f"service:x.com:username:{counterpart}",
            'username': counterpart,
            'name': counterpart.title(),
            'avatar': f"https://example.com/{counterpart}.png",
            'score': 1200,
        }
        me = {
            'userkey': 'service:x.com:username:subject_user',
            'username': 'subject_user',
            'name': 'Subject User',
            'avatar': 'https://example.com/subject_user.png',
            'score': 1500,
        }
        activity = {
            'id': f"a{next(ids)}",
            'type': 'review',
            'timestamp': timestamp,
            'archived': archived,
            'author': me if direction == 'given' else other,
            'subject': other if direction == 'given' else me,
        }
        if schema == 'data':
            activity['data'] = {'score': rating, 'comment': 'great'}
        elif schema == 'content':
            activity['content'] = {'text': 'great', 'rating': rating}
        else:
            activity['rating'] = rating
        return activity

    return _make


@pytest.fixture
def reciprocal_scenario(make_record):
    """Builds given/received records: `reciprocal` positive exchanges with the given gap,
    plus `extra_received` one-way positive received reviews."""

    def _build(reciprocal, extra_received=0, gap=timedelta(days=2), start=LONG_AGO):
        given, received = [], []
        for i in range(reciprocal):
            at = start + timedelta(hours=i)
            given.append(make_record(f"peer{i}", Direction.GIVEN, at=at))
            received.append(make_record(f"peer{i}", Direction.RECEIVED, at=at + gap))
        for i in range(extra_received):
            received.append(make_record(f"fan{i}", Direction.RECEIVED, at=start + timedelta(hours=i)))
        return given, received

    return _build


@pytest.fixture
def make_result(subject, reciprocal_scenario):
    def _make(reciprocal=3, extra_received=2, result_subject=None):
        given, received = reciprocal_scenario(reciprocal, extra_received)
        return build_analysis_result(result_subject or subject, given, received, now=NOW)

    return _make
