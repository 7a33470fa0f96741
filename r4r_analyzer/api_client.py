"""Ethos API client for fetching review activities and profile scores."""

import logging
from typing import Dict, Optional, Union
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .cache import CacheManager
from .models import Direction

DEFAULT_API_URL = 'https://api.ethos.network/api/v2'

# Upper bound on records fetched per direction
DEFAULT_ACTIVITY_LIMIT = 500


class ActivityFetchError(Exception):
    """Raised when an activity stream cannot be loaded."""

    def __init__(self, userkey: str, direction: Direction, message: str):
        self.userkey = userkey
        self.direction = direction
        super().__init__(f"Failed to fetch {direction.value} reviews for {userkey}: {message}")


class EthosAPIClient:
    """Handles Ethos API requests with retry logic and optional response caching."""

    def __init__(self, base_url: str = DEFAULT_API_URL, cache_manager: CacheManager = None,
                 timeout: float = 30.0):
        """Initialize the Ethos API client.

        Args:
            base_url: API base URL
            cache_manager: Cache for activity responses (None disables caching)
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.cache_manager = cache_manager
        self.timeout = timeout
        self.session = requests.Session()

        # Batch runs fan out two activity requests per subject, plus score lookups
        adapter = HTTPAdapter(
            pool_connections=20,
            pool_maxsize=20,
            max_retries=Retry(
                total=3,
                backoff_factor=0.3,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=None
            )
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)
        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })
        logging.info(f"Initialized Ethos API client for {self.base_url}")

    def fetch_activities(self, userkey: str, direction: Direction,
                         limit: int = DEFAULT_ACTIVITY_LIMIT, offset: int = 0) -> Dict:
        """Fetch review activities a profile gave or received.

        Args:
            userkey: Profile userkey
            direction: Direction.GIVEN or Direction.RECEIVED
            limit: Maximum number of records to return
            offset: Offset for paging

        Returns:
            The response envelope ({values, total, limit, offset})

        Raises:
            ActivityFetchError: If the request fails or the response is not JSON
        """
        cache_key = None
        if self.cache_manager is not None:
            cache_key = self.cache_manager.get_cache_key(
                userkey, f"activities/{direction.value}", {'limit': limit, 'offset': offset}
            )
            cached = self.cache_manager.get(cache_key)
            if cached is not None:
                logging.debug(f"Cache hit for {direction.value} activities of {userkey}")
                return cached

        url = f"{self.base_url}/activities/profile/{direction.value}"
        payload = {
            'userkey': userkey,
            'filter': ['review'],
            'excludeHistorical': False,
            'orderBy': {'field': 'timestamp', 'direction': 'desc'},
            'limit': limit,
            'offset': offset
        }

        logging.debug(f"Fetching {direction.value} activities for {userkey} (limit {limit}, offset {offset})")
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            if response.status_code == 429:
                logging.error(f"Rate limit exceeded while fetching {direction.value} activities for {userkey}")
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ActivityFetchError(userkey, direction, str(e)) from e

        if not isinstance(data, (dict, list)):
            raise ActivityFetchError(userkey, direction, f"unexpected response type {type(data).__name__}")

        values = data.get('values', []) if isinstance(data, dict) else data
        logging.debug(f"Fetched {len(values or [])} {direction.value} activities for {userkey}")

        if cache_key is not None:
            self.cache_manager.put(cache_key, data)

        return data

    def get_score(self, userkey: str) -> Optional[float]:
        """Fetch a profile's external reputation score.

        Returns:
            The score, or None if it is unavailable
        """
        data = self._get_json(f"{self.base_url}/score/{quote(userkey, safe='')}")
        if isinstance(data, dict):
            return _as_number(data.get('score'))
        return None

    def get_xp(self, userkey: str) -> Optional[float]:
        """Fetch a profile's total XP.

        Returns:
            The XP total, or None if it is unavailable
        """
        data = self._get_json(f"{self.base_url}/xp/user/{quote(userkey, safe='')}")
        if isinstance(data, dict):
            return _as_number(data.get('xp', data.get('totalXp')))
        return _as_number(data)

    def _get_json(self, url: str) -> Union[Dict, float, None]:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None
