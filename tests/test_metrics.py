import pytest

from galaxy_validation.metrics import Counter, Gauge, LRUCache, RateLimiter, Registry


class FakeTime:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def clock(self):
        return self.now

    async def sleep(self, duration):
        self.sleeps.append(duration)
        self.now += duration


def test_counter_counts_increments():
    counter = Counter("validation_requests_total", "Total SPV proof requests")
    times = 5
    for _ in range(times):
        counter.inc()
    assert counter.get() == times


def test_counter_accepts_amount():
    counter = Counter("validation_cache_hits")
    counter.inc(2.5)
    counter.inc(2.5)
    assert counter.get() == 2.5 + 2.5


def test_counter_rejects_negative():
    counter = Counter("validation_errors_total")
    with pytest.raises(ValueError):
        counter.inc(-1)
    assert counter.get() == 0


def test_gauge_holds_last_value():
    gauge = Gauge("validation_latency_ms")
    gauge.set(12.5)
    gauge.set(3.25)
    assert gauge.get() == 3.25


def test_registry_gathers_sorted_values():
    registry = Registry()
    requests = Counter("validation_requests_total")
    latency = Gauge("validation_latency_ms")
    registry.register(requests)
    registry.register(latency)
    requests.inc()
    latency.set(7.0)
    gathered = registry.gather()
    assert list(gathered) == sorted(["validation_requests_total", "validation_latency_ms"])
    assert gathered["validation_requests_total"] == requests.get()
    assert gathered["validation_latency_ms"] == 7.0


def test_registry_rejects_duplicate_names():
    registry = Registry()
    registry.register(Counter("validation_alert_count"))
    with pytest.raises(ValueError):
        registry.register(Counter("validation_alert_count"))


def test_lru_evicts_least_recently_used():
    cache = LRUCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.get("a") == 1
    cache.put("c", 3)
    assert "b" not in cache
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert len(cache) == cache.capacity


def test_lru_put_updates_existing():
    cache = LRUCache(1000)
    cache.put("tx", ("path", ["header"]))
    cache.put("tx", ("other", []))
    assert cache.get("tx") == ("other", [])
    assert len(cache) == 1


def test_lru_missing_key_is_none():
    cache = LRUCache(1000)
    assert cache.get("missing") is None


def test_lru_rejects_zero_capacity():
    with pytest.raises(ValueError):
        LRUCache(0)


def test_rate_limiter_rejects_zero_rate():
    with pytest.raises(ValueError):
        RateLimiter(0)


@pytest.mark.asyncio
async def test_rate_limiter_allows_burst_then_waits():
    per_second = 1000
    fake = FakeTime()
    limiter = RateLimiter(per_second, clock=fake.clock, sleep=fake.sleep)
    for _ in range(per_second):
        await limiter.until_ready()
    assert fake.sleeps == []
    await limiter.until_ready()
    assert fake.sleeps
    assert 0 < sum(fake.sleeps) <= 1 / per_second + 1e-9


@pytest.mark.asyncio
async def test_rate_limiter_refills_over_time():
    per_second = 1000
    fake = FakeTime()
    limiter = RateLimiter(per_second, clock=fake.clock, sleep=fake.sleep)
    for _ in range(per_second):
        await limiter.until_ready()
    fake.now += 1.0
    for _ in range(per_second):
        await limiter.until_ready()
    assert fake.sleeps == []