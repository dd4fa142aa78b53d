import json
import redis
from unittest.mock import MagicMock

from conftest import FakeRedis
from realtime_chat.services.cache_service import CacheService, HISTORY_GENERATION_KEY


def make_cache():
    client = MagicMock()
    return CacheService(redis_client=client, enabled=True), client


def test_history_round_trip_uses_ttl():
    cache, client = make_cache()
    history = [{"id": 1, "content": "hi"}]

    assert cache.set_history(history, 3) is True

    key, ttl, value = client.setex.call_args.args
    assert key == cache.history_key(3)
    assert ttl > 0
    assert json.loads(value) == history


def test_get_history_hit_and_miss():
    cache, client = make_cache()

    client.get.return_value = json.dumps([{"id": 1}])
    assert cache.get_history(0) == [{"id": 1}]

    client.get.return_value = None
    assert cache.get_history(0) is None


def test_generation_starts_at_zero():
    cache, client = make_cache()
    client.get.return_value = None

    assert cache.history_generation() == 0
    client.get.assert_called_once_with(HISTORY_GENERATION_KEY)


def test_redis_errors_degrade_to_miss():
    """Cache outages never fail the caller"""
    cache, client = make_cache()
    client.get.side_effect = redis.ConnectionError("down")
    client.setex.side_effect = redis.ConnectionError("down")
    client.incr.side_effect = redis.ConnectionError("down")

    assert cache.history_generation() is None
    assert cache.get_history(0) is None
    assert cache.set_history([], 0) is False
    assert cache.invalidate_history() is False


def test_invalidate_history_bumps_generation():
    cache = CacheService(redis_client=FakeRedis(), enabled=True)
    cache.set_history([{"id": 1}], 0)

    assert cache.invalidate_history() is True

    assert cache.history_generation() == 1
    assert cache.get_history(0) is None
    assert cache.get_history(1) is None


def test_fill_that_raced_an_invalidation_is_never_served():
    """
    Reader loads history, a writer stores a message and invalidates,
    then the reader fills the cache with its now-stale list.
    """
    cache = CacheService(redis_client=FakeRedis(), enabled=True)

    generation = cache.history_generation()
    stale = [{"id": 1}]

    cache.invalidate_history()
    cache.set_history(stale, generation)

    current = cache.history_generation()
    assert current != generation
    assert cache.get_history(current) is None


def test_disabled_cache_never_touches_redis():
    client = MagicMock()
    cache = CacheService(redis_client=client, enabled=False)

    assert cache.history_generation() is None
    assert cache.get_history(0) is None
    assert cache.set_history([{"id": 1}], 0) is False
    assert cache.invalidate_history() is False
    assert cache.get_stats() == {"enabled": False}
    assert client.method_calls == []


def test_stats_report_errors():
    cache, client = make_cache()
    client.info.side_effect = redis.ConnectionError("down")

    assert "error" in cache.get_stats()
