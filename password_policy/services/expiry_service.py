# password_policy/services/expiry_service.py
"""Password expiry evaluation with an optional read-through cache"""
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, FrozenSet, Optional

from password_policy.models.contracts import HasPasswordPolicy
from password_policy.models.policy_config import PolicyConfig
from password_policy.services.registry import PolicyRegistry
from password_policy.utils.clock import to_naive_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 3600


class PasswordExpiryService:
    """
    Decides whether an account's password has expired.

    Accounts of unconfigured classes and accounts that never recorded a
    password change are not expired, and neither are accounts whose change
    timestamp lies in the future.
    """

    def __init__(self, registry: PolicyRegistry, cache=None, cache_enabled: bool = False,
                 cache_ttl: int = DEFAULT_CACHE_TTL, clock: Callable[[], datetime] = utcnow):
        self.registry = registry
        self.cache = cache
        self.cache_enabled = cache_enabled and cache is not None
        self.cache_ttl = cache_ttl
        self.clock = clock

    def is_password_expired(self) -> bool:
        """Expiry state of the current principal"""
        return self.is_expired(self.registry.current_principal())

    def is_expired(self, account: Optional[HasPasswordPolicy]) -> bool:
        config = self.registry.resolve(account)
        if config is None:
            return False

        changed_at = to_naive_utc(account.get_password_changed_at())
        if changed_at is None:
            return False

        if not self.cache_enabled:
            return self._compute(config, changed_at)

        key = self.cache_key(account, changed_at)
        cached = self._cache_get(key)
        if cached is not None:
            return cached

        expired = self._compute(config, changed_at)
        self._cache_set(key, expired)
        return expired

    def _compute(self, config: PolicyConfig, changed_at: datetime) -> bool:
        now = self.clock()
        if changed_at > now:
            return False
        expires_at = changed_at + timedelta(days=config.expiry_days)
        return expires_at <= now

    def days_until_expiry(self, account: HasPasswordPolicy) -> Optional[int]:
        """Whole days left before expiry, 0 once expired, None when it never expires"""
        config = self.registry.resolve(account)
        changed_at = to_naive_utc(account.get_password_changed_at()) if config else None
        if changed_at is None:
            return None
        delta = changed_at + timedelta(days=config.expiry_days) - self.clock()
        return delta.days if delta.days > 0 else 0

    @staticmethod
    def cache_key(account: HasPasswordPolicy, changed_at: Optional[datetime] = None) -> str:
        """Key built from the account class, its id and the change timestamp"""
        cls = type(account)
        class_hash = hashlib.sha256(f'{cls.__module__}.{cls.__qualname__}'.encode()).hexdigest()[:16]
        if changed_at is None:
            changed_at = to_naive_utc(account.get_password_changed_at())
        stamp = (int(changed_at.replace(tzinfo=timezone.utc).timestamp())
                 if changed_at is not None else 'never')
        return f'password_expiry_{class_hash}_{account.get_id()}_{stamp}'

    def invalidate(self, account: HasPasswordPolicy, changed_at: Optional[datetime] = None) -> None:
        """Drop the cached result stored under ``changed_at`` (default: current value)"""
        if not self.cache_enabled:
            return
        key = self.cache_key(account, to_naive_utc(changed_at))
        try:
            self.cache.delete(key)
        except Exception:
            logger.warning('Could not invalidate expiry cache key %s', key, exc_info=True)

    def _cache_get(self, key: str) -> Optional[bool]:
        try:
            return self.cache.get(key)
        except Exception:
            logger.warning('Expiry cache read failed for %s, computing directly', key, exc_info=True)
            return None

    def _cache_set(self, key: str, value: bool) -> None:
        try:
            self.cache.set(key, value, timeout=self.cache_ttl)
        except Exception:
            logger.warning('Expiry cache write failed for %s', key, exc_info=True)

    def _config_for(self, entity_class: Optional[type]) -> Optional[PolicyConfig]:
        if entity_class is None:
            return self.registry.resolve_for_current_principal()
        return self.registry.resolve(entity_class)

    def get_locked_routes(self, entity_class: Optional[type] = None) -> FrozenSet[str]:
        config = self._config_for(entity_class)
        return config.locked_routes if config else frozenset()

    def is_locked_route(self, route: Optional[str], entity_class: Optional[type] = None) -> bool:
        return route is not None and route in self.get_locked_routes(entity_class)

    def get_excluded_routes(self, entity_class: Optional[type] = None) -> FrozenSet[str]:
        config = self._config_for(entity_class)
        return config.excluded_routes if config else frozenset()

    def get_reset_password_route_name(self, entity_class: Optional[type] = None) -> Optional[str]:
        config = self._config_for(entity_class)
        return config.reset_route_name if config else None
