"""
Unit tests for activity normalization
"""

import json
from datetime import datetime, timezone

import pytest

from r4r_analyzer.models import Direction, Rating
from r4r_analyzer.normalizer import filter_active, normalize_activities, normalize_activity, parse_timestamp, resolve_rating

JAN_1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
NOV_14_2023 = datetime.fromtimestamp(1700000000, tz=timezone.utc)


class TestParseTimestamp:
    """Test cases for timestamp parsing."""

    def test_iso_with_z(self):
        assert parse_timestamp('2024-01-01T00:00:00Z') == JAN_1

    def test_iso_with_offset(self):
        assert parse_timestamp('2024-01-01T02:00:00+02:00') == JAN_1

    def test_iso_with_fraction(self):
        assert parse_timestamp('2024-01-01T00:00:00.500Z') == JAN_1.replace(microsecond=500000)

    def test_naive_iso_is_utc(self):
        parsed = parse_timestamp('2024-01-01T00:00:00')
        assert parsed == JAN_1
        assert parsed.tzinfo is not None

    def test_unix_seconds(self):
        assert parse_timestamp(1700000000) == NOV_14_2023

    def test_unix_milliseconds(self):
        assert parse_timestamp(1700000000000) == NOV_14_2023

    def test_numeric_string(self):
        assert parse_timestamp('1700000000') == NOV_14_2023
        assert parse_timestamp('1700000000000') == NOV_14_2023

    @pytest.mark.parametrize('value', [
        None,
        '',
        'yesterday',
        '2024-13-45T00:00:00Z',
        12345,
        True,
        {'seconds': 1700000000},
        float('nan'),
        float('inf'),
        'inf',
        'Infinity',
        '-inf',
        -1700000000,
    ])
    def test_unparseable_values(self, value):
        assert parse_timestamp(value) is None


class TestResolveRating:
    """Test cases for rating resolution across schema variants."""

    def test_flat_rating(self):
        assert resolve_rating({'rating': 'positive'}) == Rating.POSITIVE

    def test_data_score(self):
        assert resolve_rating({'data': {'score': 'negative'}}) == Rating.NEGATIVE

    def test_content_rating(self):
        assert resolve_rating({'content': {'text': 'ok', 'rating': 'Neutral'}}) == Rating.NEUTRAL

    def test_data_score_takes_precedence_over_content(self):
        activity = {'data': {'score': 'negative'}, 'content': {'rating': 'positive'}}
        assert resolve_rating(activity) == Rating.NEGATIVE

    def test_empty_value_falls_through(self):
        activity = {'data': {'score': ''}, 'content': {'rating': 'positive'}}
        assert resolve_rating(activity) == Rating.POSITIVE

    @pytest.mark.parametrize('activity', [
        {},
        {'data': {'score': 5}},
        {'data': {'score': 'great'}},
        {'rating': {'value': 'positive'}},
        {'data': 'positive'},
        {'content': None},
    ])
    def test_unknown_shapes(self, activity):
        assert resolve_rating(activity) == Rating.UNKNOWN


class TestNormalizeActivities:
    """Test cases for converting payloads into records."""

    def test_given_counterpart_is_review_subject(self, make_activity):
        record = normalize_activity(make_activity('alice', 'given'), Direction.GIVEN)
        assert record.counterpart_identity == 'alice'
        assert record.counterpart.name == 'Alice'
        assert record.direction == Direction.GIVEN
        assert record.rating == Rating.POSITIVE

    def test_received_counterpart_is_review_author(self, make_activity):
        record = normalize_activity(make_activity('bob', 'received', rating='negative'), Direction.RECEIVED)
        assert record.counterpart_identity == 'bob'
        assert record.rating == Rating.NEGATIVE

    def test_counterpart_falls_back_to_userkey(self):
        activity = {'id': 1, 'timestamp': 1700000000, 'subject': {'userkey': 'profileId:42'}}
        record = normalize_activity(activity, Direction.GIVEN)
        assert record.counterpart_identity == 'profileId:42'

    def test_missing_counterpart(self):
        record = normalize_activity({'id': 1, 'timestamp': 1700000000}, Direction.RECEIVED)
        assert record.counterpart_identity == ''

    def test_created_at_fallback(self):
        activity = {'id': 'x', 'createdAt': '2024-01-01T00:00:00Z', 'subject': {'username': 'carol'}}
        record = normalize_activity(activity, Direction.GIVEN)
        assert record.timestamp == JAN_1
        assert record.raw_timestamp == '2024-01-01T00:00:00Z'

    def test_invalid_timestamp_is_marked(self, make_activity):
        record = normalize_activity(make_activity('alice', timestamp='soon'), Direction.GIVEN)
        assert record.timestamp is None
        assert not record.has_valid_timestamp
        assert record.raw_timestamp == 'soon'

    def test_envelope_payload(self, make_activity):
        payload = {
            'values': [make_activity('alice'), make_activity('bob', schema='content')],
            'total': 2,
            'limit': 500,
            'offset': 0,
        }
        records = normalize_activities(payload, Direction.GIVEN)
        assert [r.counterpart_identity for r in records] == ['alice', 'bob']
        assert all(r.rating == Rating.POSITIVE for r in records)

    def test_bare_list_payload(self, make_activity):
        records = normalize_activities([make_activity('alice', schema='flat')], Direction.GIVEN)
        assert len(records) == 1
        assert records[0].rating == Rating.POSITIVE

    def test_malformed_entries_are_skipped(self, make_activity):
        records = normalize_activities({'values': [None, 'oops', make_activity('alice')]}, Direction.GIVEN)
        assert len(records) == 1

    @pytest.mark.parametrize('payload', [None, {}, {'values': None}, 'error'])
    def test_empty_payloads(self, payload):
        assert normalize_activities(payload, Direction.GIVEN) == []

    def test_archived_records_pass_through_flagged(self, make_activity):
        records = normalize_activities([make_activity('alice', archived=True), make_activity('bob')],
                                       Direction.GIVEN)
        assert len(records) == 2
        assert records[0].archived is True
        assert [r.counterpart_identity for r in filter_active(records)] == ['bob']

    def test_infinite_json_timestamp_is_marked_invalid(self):
        payload = json.loads('{"values": [{"id": 1, "timestamp": Infinity, "subject": {"username": "alice"}}]}')

        records = normalize_activities(payload, Direction.GIVEN)

        assert len(records) == 1
        assert records[0].timestamp is None
        assert records[0].counterpart_identity == 'alice'

    @pytest.mark.parametrize('flag', ['false', 'true', 1, None])
    def test_only_boolean_true_marks_archived(self, make_activity, flag):
        activity = make_activity('alice')
        activity['archived'] = flag

        assert normalize_activity(activity, Direction.GIVEN).archived is False
