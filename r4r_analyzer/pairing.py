"""Joining given and received reviews into per-counterpart pairs."""

import logging
from typing import Dict, List, Optional, Sequence

from .models import ActivityRecord, Rating, ReviewPair


def is_reciprocal(given: Optional[ActivityRecord], received: Optional[ActivityRecord]) -> bool:
    """A relationship is reciprocal only when both sides exist and both are positive."""
    if given is None or received is None:
        return False
    return given.rating == Rating.POSITIVE and received.rating == Rating.POSITIVE


def pair_reviews(given: Sequence[ActivityRecord], received: Sequence[ActivityRecord]) -> List[ReviewPair]:
    """Match given and received reviews by counterpart identity.

    Identities are compared exactly (case-sensitive). When a counterpart has several
    records in the same direction, the first one encountered is kept and later ones
    are ignored.

    Args:
        given: Non-archived reviews the subject gave
        received: Non-archived reviews the subject received

    Returns:
        One pair per counterpart, reciprocal pairs first, then by display name
    """
    given_by_identity: Dict[str, ActivityRecord] = {}
    received_by_identity: Dict[str, ActivityRecord] = {}
    order: List[str] = []

    for record in given:
        identity = record.counterpart_identity
        if not identity:
            logging.debug(f"Given review {record.id} has no counterpart, not pairing it")
            continue
        if identity in given_by_identity:
            logging.debug(f"Ignoring duplicate given review {record.id} for {identity}")
            continue
        given_by_identity[identity] = record
        order.append(identity)

    for record in received:
        identity = record.counterpart_identity
        if not identity:
            logging.debug(f"Received review {record.id} has no counterpart, not pairing it")
            continue
        if identity in received_by_identity:
            logging.debug(f"Ignoring duplicate received review {record.id} for {identity}")
            continue
        received_by_identity[identity] = record
        if identity not in given_by_identity:
            order.append(identity)

    pairs = []
    for identity in order:
        given_record = given_by_identity.get(identity)
        received_record = received_by_identity.get(identity)
        # Display details come from the given side when present
        counterpart = (given_record or received_record).counterpart
        pairs.append(ReviewPair(
            counterpart=counterpart,
            given_record=given_record,
            received_record=received_record,
            is_reciprocal=is_reciprocal(given_record, received_record),
        ))

    return sort_pairs(pairs)


def sort_pairs(pairs: List[ReviewPair]) -> List[ReviewPair]:
    """Sort reciprocal pairs first, then by display name (case-insensitive)."""
    return sorted(pairs, key=lambda pair: (not pair.is_reciprocal, pair.counterpart.display_name.lower()))
