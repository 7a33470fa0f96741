"""Normalization of upstream activity payloads into ActivityRecord instances."""

import logging
import math
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from .models import ActivityRecord, Counterpart, Direction, Rating


# Where the rating lives across payload versions, in lookup order
RATING_FIELD_PATHS = [
    ('rating',),
    ('data', 'score'),
    ('content', 'rating'),
]

TIMESTAMP_FIELDS = ['timestamp', 'createdAt']

_RATINGS_BY_NAME = {
    'positive': Rating.POSITIVE,
    'negative': Rating.NEGATIVE,
    'neutral': Rating.NEUTRAL,
}


def parse_timestamp(value: Union[str, int, float, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string or a Unix timestamp in seconds or milliseconds.

    Args:
        value: Raw timestamp from the payload

    Returns:
        Timezone-aware datetime in UTC, or None if the value cannot be parsed
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _parse_unix(value)

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    if 'T' in text or '-' in text:
        return _parse_iso(text)

    try:
        return _parse_unix(float(text))
    except ValueError:
        return None


def _parse_iso(text: str) -> Optional[datetime]:
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_unix(number: float) -> Optional[datetime]:
    if not math.isfinite(number) or number < 0:
        return None

    digits = len(str(int(number)))
    if digits == 10:
        seconds = number
    elif digits == 13:
        seconds = number / 1000
    else:
        return None

    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def resolve_rating(activity: Dict) -> Rating:
    """Resolve the rating of an activity regardless of which schema variant it uses.

    The first string value found along RATING_FIELD_PATHS wins. Anything that
    is not a recognized rating word resolves to Rating.UNKNOWN.
    """
    for path in RATING_FIELD_PATHS:
        value = activity
        for key in path:
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(key)
        if isinstance(value, str):
            if not value.strip():
                continue
            rating = _RATINGS_BY_NAME.get(value.strip().lower())
            if rating is None:
                logging.debug(f"Unrecognized rating value '{value}' in activity {activity.get('id')}")
                return Rating.UNKNOWN
            return rating
        if value is not None:
            logging.debug(f"Unrecognized rating shape at {'.'.join(path)} in activity {activity.get('id')}")
            return Rating.UNKNOWN

    return Rating.UNKNOWN


def _extract_counterpart(activity: Dict, direction: Direction) -> Counterpart:
    # For reviews the subject gave, the other party is the review's subject;
    # for reviews the subject received, it is the review's author
    party_key = 'subject' if direction == Direction.GIVEN else 'author'
    party = activity.get(party_key)
    if not isinstance(party, dict):
        party = {}

    username = party.get('username') or ''
    userkey = party.get('userkey') or ''
    score = party.get('score')
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        score = None

    return Counterpart(
        identity=str(username or userkey),
        userkey=str(userkey),
        name=str(party.get('name') or ''),
        avatar=str(party.get('avatar') or ''),
        score=score,
    )


def normalize_activity(activity: Dict, direction: Direction) -> ActivityRecord:
    """Convert one raw activity into an ActivityRecord."""
    raw_timestamp = None
    for field_name in TIMESTAMP_FIELDS:
        if activity.get(field_name) is not None:
            raw_timestamp = activity[field_name]
            break

    timestamp = parse_timestamp(raw_timestamp)
    if timestamp is None:
        logging.debug(f"Invalid timestamp {raw_timestamp!r} in activity {activity.get('id')}")

    return ActivityRecord(
        id=str(activity.get('id', '')),
        timestamp=timestamp,
        archived=activity.get('archived') is True,
        counterpart=_extract_counterpart(activity, direction),
        direction=direction,
        rating=resolve_rating(activity),
        raw_timestamp=raw_timestamp,
    )


def normalize_activities(payload: Union[Dict, List, None], direction: Direction) -> List[ActivityRecord]:
    """Normalize an activity response into records.

    Args:
        payload: Either the {values, total, limit, offset} envelope or a bare list
        direction: Whether these are reviews the subject gave or received

    Returns:
        List of records in payload order, archived ones included
    """
    if isinstance(payload, dict):
        values = payload.get('values') or []
    elif isinstance(payload, list):
        values = payload
    else:
        values = []

    records = []
    for activity in values:
        if not isinstance(activity, dict):
            logging.warning(f"Skipping malformed {direction.value} activity: {activity!r}")
            continue
        records.append(normalize_activity(activity, direction))

    logging.debug(f"Normalized {len(records)} {direction.value} activities")
    return records


def filter_active(records: Iterable[ActivityRecord]) -> List[ActivityRecord]:
    """Drop archived records."""
    return [record for record in records if not record.archived]
