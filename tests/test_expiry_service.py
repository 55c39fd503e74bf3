"""Test password expiry evaluation and its cache"""
from datetime import timedelta, timezone

import pytest

from conftest import CountingCache, FakeAccount, FrozenClock
from password_policy.models import PolicyConfig
from password_policy.services.cache import ExpiryCache
from password_policy.services.expiry_service import PasswordExpiryService
from password_policy.services.registry import PolicyRegistry


class Unconfigured:
    pass


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def registry():
    registry = PolicyRegistry()
    registry.add_config(PolicyConfig(FakeAccount, 'auth.reset', expiry_days=90,
                                     locked_routes=['dashboard.index', 'auth.reset'],
                                     excluded_routes=['auth.reset']))
    return registry


def account_changed(clock, **delta):
    return FakeAccount(changed_at=clock.now - timedelta(**delta))


@pytest.mark.parametrize('delta,expired', [
    ({'days': 90}, True),
    ({'days': 89}, False),
    ({'days': 89, 'hours': 23, 'minutes': 59}, False),
    ({'days': 100}, True),
    ({'days': -1}, False),
])
def test_expiry_boundary(registry, clock, delta, expired):
    service = PasswordExpiryService(registry, clock=clock)

    assert service.is_expired(account_changed(clock, **delta)) is expired


def test_never_changed_password_is_not_expired(registry, clock):
    service = PasswordExpiryService(registry, clock=clock)

    assert service.is_expired(FakeAccount(changed_at=None)) is False


def test_unconfigured_or_missing_account_is_not_expired(registry, clock):
    service = PasswordExpiryService(registry, clock=clock)

    assert service.is_expired(Unconfigured()) is False
    assert service.is_expired(None) is False


def test_aware_timestamps_are_normalised(registry, clock):
    service = PasswordExpiryService(registry, clock=clock)
    changed_at = (clock.now - timedelta(days=91)).replace(tzinfo=timezone.utc)

    assert service.is_expired(FakeAccount(changed_at=changed_at)) is True


def test_current_principal(clock):
    account = FakeAccount(changed_at=clock.now - timedelta(days=120))
    registry = PolicyRegistry(principal_loader=lambda: account)
    registry.add_config(PolicyConfig(FakeAccount, 'auth.reset'))

    assert PasswordExpiryService(registry, clock=clock).is_password_expired() is True


def test_second_call_hits_cache(registry, clock):
    cache = CountingCache()
    service = PasswordExpiryService(registry, cache=cache, cache_enabled=True, clock=clock)
    account = account_changed(clock, days=10)
    calls = []
    compute = service._compute
    service._compute = lambda config, changed_at: calls.append(1) or compute(config, changed_at)

    first = service.is_expired(account)
    second = service.is_expired(account)

    assert first is second is False
    assert len(calls) == 1
    assert cache.sets == 1


def test_cache_disabled_without_backend(registry, clock):
    service = PasswordExpiryService(registry, cache=None, cache_enabled=True, clock=clock)

    assert service.cache_enabled is False
    assert service.is_expired(account_changed(clock, days=91)) is True


def test_cache_key_changes_with_timestamp(clock):
    account = account_changed(clock, days=1)
    key = PasswordExpiryService.cache_key(account)

    assert key.startswith('password_expiry_')
    assert key.endswith('_1_' + str(int(account.changed_at.replace(tzinfo=timezone.utc).timestamp())))
    account.changed_at = clock.now
    assert PasswordExpiryService.cache_key(account) != key
    assert PasswordExpiryService.cache_key(FakeAccount()).endswith('_never')


def test_invalidate_deletes_previous_key(registry, clock):
    cache = CountingCache()
    service = PasswordExpiryService(registry, cache=cache, cache_enabled=True, clock=clock)
    account = account_changed(clock, days=10)
    previous = account.changed_at
    service.is_expired(account)

    service.invalidate(account, previous)

    assert cache.deleted == [service.cache_key(account, previous)]
    assert cache.data == {}


class BrokenCache:
    def get(self, key):
        raise ConnectionError('cache down')

    def set(self, key, value, timeout=None):
        raise ConnectionError('cache down')

    def delete(self, key):
        raise ConnectionError('cache down')


def test_cache_failure_falls_back_to_computation(registry, clock):
    service = PasswordExpiryService(registry, cache=BrokenCache(), cache_enabled=True, clock=clock)
    account = account_changed(clock, days=91)

    assert service.is_expired(account) is True
    service.invalidate(account)


def test_days_until_expiry(registry, clock):
    service = PasswordExpiryService(registry, clock=clock)

    assert service.days_until_expiry(account_changed(clock, days=80)) == 10
    assert service.days_until_expiry(account_changed(clock, days=95)) == 0
    assert service.days_until_expiry(FakeAccount(changed_at=None)) is None


def test_route_lookups(registry, clock):
    service = PasswordExpiryService(registry, clock=clock)

    assert service.get_locked_routes(FakeAccount) == {'dashboard.index', 'auth.reset'}
    assert service.get_excluded_routes(FakeAccount) == {'auth.reset'}
    assert service.is_locked_route('dashboard.index', FakeAccount)
    assert not service.is_locked_route(None, FakeAccount)
    assert service.get_reset_password_route_name(FakeAccount) == 'auth.reset'
    assert service.get_locked_routes() == frozenset()
    assert service.get_reset_password_route_name(Unconfigured) is None


def test_expiry_cache_times_out():
    now = [100.0]
    cache = ExpiryCache(default_timeout=10, timer=lambda: now[0])
    cache.set('key', True)

    assert cache.get('key') is True
    now[0] += 10
    assert cache.get('key') is None
    assert len(cache) == 0


def test_expiry_cache_delete_and_clear():
    cache = ExpiryCache()
    cache.set('a', False, timeout=60)
    cache.set('b', True)

    assert cache.get('a') is False
    assert cache.delete('a') is True
    assert cache.delete('a') is False
    cache.clear()
    assert len(cache) == 0
