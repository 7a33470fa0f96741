"""File-backed cache for Ethos API responses."""

import os
import json
import hashlib
import logging
from datetime import datetime
from threading import Lock
from typing import Dict, Optional, Union

DEFAULT_CACHE_FILE = '.r4r_activity_cache.json'


class CacheManager:
    """Caches activity responses between runs.

    Instances are created and owned by the caller and passed to the API client;
    there is no process-wide cache.
    """

    def __init__(self, cache_file: str = DEFAULT_CACHE_FILE, use_cache: bool = True,
                 max_age_hours: Optional[float] = 6):
        """Initialize the cache manager.

        Args:
            cache_file: Path to the cache file
            use_cache: Whether caching is enabled
            max_age_hours: Entries older than this are treated as missing (None = never expire)
        """
        self.cache_file = cache_file
        self.use_cache = use_cache
        self.max_age_hours = max_age_hours
        self._lock = Lock()
        self.cache = self._load_cache()

    def _load_cache(self) -> Dict:
        """Load cache from file."""
        if not self.use_cache or not os.path.exists(self.cache_file):
            return {}

        try:
            with open(self.cache_file, 'r', encoding='utf-8') as f:
                cache = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logging.warning(f"Failed to load cache: {e}")
            return {}

        if not isinstance(cache, dict):
            logging.warning(f"Ignoring malformed cache file {self.cache_file}")
            return {}

        logging.info(f"Loaded cache from {self.cache_file} with {len(cache)} entries")
        return cache

    def save_cache(self):
        """Save cache to file."""
        if not self.use_cache:
            return

        with self._lock:
            expired = [key for key, entry in self.cache.items() if self._is_expired(entry)]
            for key in expired:
                del self.cache[key]
            snapshot = dict(self.cache)
        if expired:
            logging.debug(f"Dropped {len(expired)} expired cache entries")

        try:
            with open(self.cache_file, 'w', encoding='utf-8') as f:
                json.dump(snapshot, f, indent=2)
            logging.info(f"Saved cache to {self.cache_file} with {len(snapshot)} entries")
        except OSError as e:
            logging.warning(f"Failed to save cache: {e}")

    def get_cache_key(self, userkey: str, endpoint: str, params: Dict = None) -> str:
        """Generate a cache key for an API call.

        Returns:
            MD5 hash of the userkey, endpoint and sorted parameters
        """
        key_data = f"{userkey}:{endpoint}:{json.dumps(params, sort_keys=True) if params else ''}"
        return hashlib.md5(key_data.encode()).hexdigest()

    def get(self, cache_key: str) -> Union[Dict, list, None]:
        """Get data from cache if it exists and has not expired.

        Returns:
            Cached data if available, None otherwise
        """
        if not self.use_cache:
            return None

        with self._lock:
            cached_entry = self.cache.get(cache_key)
        if cached_entry is None:
            return None

        age_hours = self._entry_age_hours(cached_entry)
        if age_hours is None:
            logging.debug(f"Discarding cache entry {cache_key} without a valid timestamp")
            return None
        if self.max_age_hours is not None and age_hours > self.max_age_hours:
            logging.debug(f"Cache entry expired (age: {age_hours:.1f} hours)")
            return None

        logging.debug(f"Using cached data (age: {age_hours:.1f} hours)")
        return cached_entry.get('data')

    def put(self, cache_key: str, data: Union[Dict, list]):
        """Store data in cache."""
        if not self.use_cache:
            return

        with self._lock:
            self.cache[cache_key] = {
                'timestamp': datetime.now().isoformat(),
                'data': data
            }

    def _entry_age_hours(self, entry) -> Optional[float]:
        try:
            cached_time = datetime.fromisoformat(entry['timestamp'])
            return (datetime.now() - cached_time).total_seconds() / 3600
        except (KeyError, TypeError, ValueError):
            return None

    def _is_expired(self, entry) -> bool:
        """Entries without a readable timestamp count as expired."""
        age_hours = self._entry_age_hours(entry)
        if age_hours is None:
            return True
        return self.max_age_hours is not None and age_hours > self.max_age_hours

    def __contains__(self, key: str) -> bool:
        return key in self.cache
