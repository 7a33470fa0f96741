"""
Unit tests for review pairing
"""

import itertools

from r4r_analyzer.models import Direction, Rating
from r4r_analyzer.pairing import is_reciprocal, pair_reviews

GIVEN = Direction.GIVEN
RECEIVED = Direction.RECEIVED


class TestPairReviews:
    """Test cases for joining given and received reviews."""

    def test_reciprocal_and_one_way_pairs(self, make_record):
        given = [make_record('bob', GIVEN), make_record('alice', GIVEN)]
        received = [make_record('alice', RECEIVED), make_record('carol', RECEIVED)]

        pairs = pair_reviews(given, received)

        assert [p.counterpart_identity for p in pairs] == ['alice', 'bob', 'carol']
        assert pairs[0].is_reciprocal is True
        assert pairs[0].given_record is given[1]
        assert pairs[0].received_record is received[0]
        assert pairs[1].received_record is None
        assert pairs[2].given_record is None
        assert not pairs[1].is_reciprocal and not pairs[2].is_reciprocal

    def test_reciprocal_pairs_sort_first(self, make_record):
        given = [make_record('aaron', GIVEN), make_record('zed', GIVEN)]
        received = [make_record('zed', RECEIVED)]

        pairs = pair_reviews(given, received)

        assert [p.counterpart_identity for p in pairs] == ['zed', 'aaron']

    def test_sort_by_display_name_ignores_case(self, make_record):
        given = [
            make_record('u1', GIVEN, name='bob'),
            make_record('u2', GIVEN, name='Alice'),
            make_record('u3', GIVEN, name='carol'),
        ]

        pairs = pair_reviews(given, [])

        assert [p.counterpart.display_name for p in pairs] == ['Alice', 'bob', 'carol']

    def test_first_given_record_wins(self, make_record):
        first = make_record('alice', GIVEN, rating=Rating.POSITIVE)
        second = make_record('alice', GIVEN, rating=Rating.NEGATIVE)

        pairs = pair_reviews([first, second], [make_record('alice', RECEIVED)])

        assert len(pairs) == 1
        assert pairs[0].given_record is first
        assert pairs[0].is_reciprocal is True

    def test_first_received_record_wins(self, make_record):
        first = make_record('alice', RECEIVED, rating=Rating.NEGATIVE)
        second = make_record('alice', RECEIVED, rating=Rating.POSITIVE)

        pairs = pair_reviews([make_record('alice', GIVEN)], [first, second])

        assert len(pairs) == 1
        assert pairs[0].received_record is first
        assert pairs[0].is_reciprocal is False

    def test_duplicate_received_only_records(self, make_record):
        first = make_record('carol', RECEIVED)
        pairs = pair_reviews([], [first, make_record('carol', RECEIVED)])

        assert len(pairs) == 1
        assert pairs[0].received_record is first

    def test_identity_match_is_case_sensitive(self, make_record):
        pairs = pair_reviews([make_record('Alice', GIVEN)], [make_record('alice', RECEIVED)])

        assert len(pairs) == 2
        assert not any(p.is_reciprocal for p in pairs)

    def test_negative_negative_pair_exists_but_is_not_reciprocal(self, make_record):
        given = [make_record('mallory', GIVEN, rating=Rating.NEGATIVE)]
        received = [make_record('mallory', RECEIVED, rating=Rating.NEGATIVE)]

        pairs = pair_reviews(given, received)

        assert len(pairs) == 1
        assert pairs[0].has_both_sides
        assert pairs[0].is_reciprocal is False

    def test_records_without_counterpart_are_not_paired(self, make_record):
        pairs = pair_reviews([make_record('', GIVEN)], [make_record('', RECEIVED)])
        assert pairs == []

    def test_empty_inputs(self):
        assert pair_reviews([], []) == []

    def test_counterparts_are_unique(self, make_record):
        names = ['a', 'b', 'c', 'a', 'b', 'A']
        ratings = [Rating.POSITIVE, Rating.NEGATIVE, Rating.UNKNOWN]
        given = [make_record(n, GIVEN, rating=r) for n, r in zip(names, itertools.cycle(ratings))]
        received = [make_record(n, RECEIVED, rating=r) for n, r in zip(reversed(names), itertools.cycle(ratings))]

        pairs = pair_reviews(given, received)
        identities = [p.counterpart_identity for p in pairs]

        assert len(identities) == len(set(identities)) == 4


class TestIsReciprocal:
    """Test cases for the reciprocity rule."""

    def test_only_positive_positive_is_reciprocal(self, make_record):
        for given_rating, received_rating in itertools.product(Rating, Rating):
            given = make_record('x', GIVEN, rating=given_rating)
            received = make_record('x', RECEIVED, rating=received_rating)
            expected = given_rating == Rating.POSITIVE and received_rating == Rating.POSITIVE
            assert is_reciprocal(given, received) is expected

    def test_missing_side_is_never_reciprocal(self, make_record):
        assert is_reciprocal(make_record('x', GIVEN), None) is False
        assert is_reciprocal(None, make_record('x', RECEIVED)) is False
