"""
Unit tests for caching functionality
"""

import json
import os
import tempfile
from datetime import datetime, timedelta

import pytest

from r4r_analyzer.cache import CacheManager


class TestCacheManager:
    """Test cases for basic cache operations."""

    @pytest.fixture
    def temp_cache_file(self):
        """Create a temporary cache file path for testing."""
        fd, path = tempfile.mkstemp(suffix='.json')
        os.close(fd)
        os.remove(path)
        yield path
        if os.path.exists(path):
            os.remove(path)

    def test_cache_key_generation(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file)
        key1 = cache.get_cache_key('user1', 'activities/given', {'limit': 500, 'offset': 0})
        key2 = cache.get_cache_key('user1', 'activities/given', {'offset': 0, 'limit': 500})
        key3 = cache.get_cache_key('user1', 'activities/received', {'limit': 500, 'offset': 0})

        assert key1 == key2  # Parameter order does not matter
        assert key1 != key3

    def test_put_and_get(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file)
        cache.put('k', {'values': [1, 2]})

        assert 'k' in cache
        assert cache.get('k') == {'values': [1, 2]}

    def test_save_and_load(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file)
        cache.put('k', {'values': ['a']})
        cache.save_cache()

        reloaded = CacheManager(cache_file=temp_cache_file)
        assert reloaded.get('k') == {'values': ['a']}

    def test_expired_entries_are_ignored(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file, max_age_hours=6)
        cache.cache['old'] = {
            'timestamp': (datetime.now() - timedelta(hours=7)).isoformat(),
            'data': {'values': []}
        }

        assert cache.get('old') is None

    def test_no_expiry(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file, max_age_hours=None)
        cache.cache['old'] = {
            'timestamp': (datetime.now() - timedelta(days=90)).isoformat(),
            'data': {'values': []}
        }

        assert cache.get('old') == {'values': []}

    def test_entry_without_timestamp(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file)
        cache.cache['bad'] = {'data': {'values': []}}

        assert cache.get('bad') is None

    def test_disabled_cache(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file, use_cache=False)
        cache.put('k', {'values': []})
        cache.save_cache()

        assert cache.get('k') is None
        assert not os.path.exists(temp_cache_file)

    def test_corrupted_file(self, temp_cache_file):
        with open(temp_cache_file, 'w') as f:
            f.write('{not json')

        assert CacheManager(cache_file=temp_cache_file).cache == {}

    def test_non_dict_file(self, temp_cache_file):
        with open(temp_cache_file, 'w') as f:
            json.dump(['a', 'b'], f)

        assert CacheManager(cache_file=temp_cache_file).cache == {}

    def test_save_drops_expired_entries(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file, max_age_hours=6)
        cache.put('fresh', {'values': [1]})
        cache.cache['stale'] = {
            'timestamp': (datetime.now() - timedelta(hours=7)).isoformat(),
            'data': {'values': []}
        }
        cache.cache['broken'] = {'data': {'values': []}}

        cache.save_cache()

        assert set(cache.cache) == {'fresh'}
        with open(temp_cache_file, encoding='utf-8') as f:
            assert set(json.load(f)) == {'fresh'}

    def test_save_keeps_old_entries_without_expiry(self, temp_cache_file):
        cache = CacheManager(cache_file=temp_cache_file, max_age_hours=None)
        cache.cache['old'] = {
            'timestamp': (datetime.now() - timedelta(days=90)).isoformat(),
            'data': {'values': []}
        }

        cache.save_cache()

        assert 'old' in CacheManager(cache_file=temp_cache_file, max_age_hours=None)
