from booking.core.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_or_fetch_reuses_value_until_expiry() -> None:
    clock = FakeClock()
    cache = TTLCache(clock=clock)
    calls = []

    def fetch():
        calls.append(clock.now)
        return f'value-{len(calls)}'

    assert cache.get_or_fetch('notifications', 30, fetch) == 'value-1'
    clock.now += 29
    assert cache.get_or_fetch('notifications', 30, fetch) == 'value-1'
    clock.now += 1
    assert cache.get_or_fetch('notifications', 30, fetch) == 'value-2'
    assert len(calls) == 2


def test_entries_are_kept_per_key() -> None:
    cache = TTLCache(clock=FakeClock())

    cache.set('a@example.com', ['first'], 30)
    cache.set('b@example.com', ['second'], 30)

    assert cache.get('a@example.com') == ['first']
    assert cache.get('b@example.com') == ['second']


def test_empty_results_are_cached() -> None:
    cache = TTLCache(clock=FakeClock())
    calls = []

    def fetch():
        calls.append(1)
        return []

    cache.get_or_fetch('empty', 30, fetch)
    cache.get_or_fetch('empty', 30, fetch)

    assert len(calls) == 1


def test_invalidate_and_clear() -> None:
    cache = TTLCache(clock=FakeClock())
    cache.set('a', 1, 30)
    cache.set('b', 2, 30)

    cache.invalidate('a')
    assert cache.get('a') is None
    assert cache.get('b') == 2

    cache.clear()
    assert cache.get('b') is None
