"""Fetching and lookup methods for R4RAnalyzer."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Dict, Tuple, Union

import requests

from ..api_client import ActivityFetchError
from ..assembler import annotate_counterpart_scores
from ..models import AnalysisResult, Direction, Subject


def _fetch_activity_streams(self, subject: Subject) -> Tuple[Union[Dict, list], Union[Dict, list]]:
    """Fetch given and received activities in parallel.

    Both fetches must succeed; scoring a single stream would give a misleading result.

    Returns:
        Tuple of (given_payload, received_payload)

    Raises:
        AnalysisError: As soon as either fetch fails
    """
    from .core import AnalysisError

    payloads = {}
    executor = ThreadPoolExecutor(max_workers=2)
    try:
        future_to_direction = {
            executor.submit(self.api_client.fetch_activities, subject.userkey, direction, self.activity_limit): direction
            for direction in (Direction.GIVEN, Direction.RECEIVED)
        }

        for future in as_completed(future_to_direction):
            direction = future_to_direction[future]
            try:
                payloads[direction] = future.result()
            except ActivityFetchError as e:
                logging.error(str(e))
                raise AnalysisError(subject, str(e), direction) from e
    finally:
        # Don't wait on the other stream once one has failed
        executor.shutdown(wait=False, cancel_futures=True)

    return payloads[Direction.GIVEN], payloads[Direction.RECEIVED]


def _resolve_subject(self, subject: Subject, given_payload: Union[Dict, list],
                     received_payload: Union[Dict, list]) -> Subject:
    """Fill in missing profile details from the first activity that names the subject.

    The subject is the author of reviews it gave and the subject of reviews it received.
    """
    if subject.username and subject.name:
        return subject

    for payload, role in ((given_payload, 'author'), (received_payload, 'subject')):
        values = payload.get('values') if isinstance(payload, dict) else payload
        for activity in values or []:
            party = activity.get(role) if isinstance(activity, dict) else None
            if isinstance(party, dict) and party.get('username'):
                return replace(
                    subject,
                    username=subject.username or str(party.get('username') or ''),
                    name=subject.name or str(party.get('name') or ''),
                    avatar=subject.avatar or str(party.get('avatar') or ''),
                )

    logging.debug(f"No profile details found in activities for {subject.userkey}")
    return subject


def _lookup_profile_scores(self, subject: Subject) -> Subject:
    """Fetch the subject's external score and XP in parallel (best effort)."""
    with ThreadPoolExecutor(max_workers=2) as executor:
        future_score = executor.submit(self.api_client.get_score, subject.userkey)
        future_xp = executor.submit(self.api_client.get_xp, subject.userkey)

        score = subject.score
        try:
            score = future_score.result()
        except (requests.exceptions.RequestException, ValueError) as e:
            logging.warning(f"Error fetching Ethos score for {subject.userkey}: {e}")

        xp = subject.xp
        try:
            xp = future_xp.result()
        except (requests.exceptions.RequestException, ValueError) as e:
            logging.warning(f"Error fetching Ethos XP for {subject.userkey}: {e}")

    return replace(subject, score=score, xp=xp)


def _annotate_pairs(self, result: AnalysisResult) -> AnalysisResult:
    """Attach stored counterpart scores to the pairs, if a store is configured."""
    if self.store is None:
        return result

    try:
        scores = self.store.get_scores()
    except (OSError, KeyError, TypeError) as e:
        logging.warning(f"Could not load counterpart scores: {e}")
        return result

    return annotate_counterpart_scores(result, scores)
