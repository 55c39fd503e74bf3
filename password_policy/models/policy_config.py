# password_policy/models/policy_config.py
"""Immutable per-account-class policy configuration"""
from dataclasses import dataclass, field
from typing import FrozenSet

from password_policy.exceptions import ConfigurationError
from password_policy.models.contracts import ACCOUNT_METHODS, missing_methods

DEFAULT_PASSWORD_FIELD = 'password'
DEFAULT_HISTORY_FIELD = 'password_history'
DEFAULT_PASSWORDS_TO_REMEMBER = 3
DEFAULT_EXPIRY_DAYS = 90
DEFAULT_EXTENSION_MIN_LENGTH = 4


@dataclass(frozen=True)
class PolicyConfig:
    """
    Password policy for one account class.

    Attributes:
        entity_class: Account class the policy applies to (subclasses included).
        reset_route_name: Endpoint users are sent to when their password expired.
            Required and unique across all configured classes.
        expiry_days: Days a password stays valid after it was changed.
        password_field: Mapped attribute holding the password hash. Must equal
            the class's ``__password_field__`` when it declares one.
        history_field: Relationship holding the history entries. Must equal
            the class's ``__password_history_field__`` when it declares one.
        history_limit: Number of archived passwords to keep.
        locked_routes: Endpoints that trigger the expiry check.
        excluded_routes: Endpoints exempted even when listed in ``locked_routes``.
        detect_extensions: Also reject trivial variants of old passwords.
        extension_min_length: Shortest stripped remainder worth checking.
    """

    entity_class: type
    reset_route_name: str
    expiry_days: int = DEFAULT_EXPIRY_DAYS
    password_field: str = DEFAULT_PASSWORD_FIELD
    history_field: str = DEFAULT_HISTORY_FIELD
    history_limit: int = DEFAULT_PASSWORDS_TO_REMEMBER
    locked_routes: FrozenSet[str] = field(default_factory=frozenset)
    excluded_routes: FrozenSet[str] = field(default_factory=frozenset)
    detect_extensions: bool = False
    extension_min_length: int = DEFAULT_EXTENSION_MIN_LENGTH

    def __post_init__(self):
        name = getattr(self.entity_class, '__name__', repr(self.entity_class))
        if not isinstance(self.entity_class, type):
            raise ConfigurationError(f'Entity {self.entity_class!r} is not a class')

        missing = missing_methods(self.entity_class, ACCOUNT_METHODS)
        if missing:
            raise ConfigurationError(
                f"Entity {name} doesn't implement the password policy account methods: "
                f"{', '.join(missing)}"
            )

        if not isinstance(self.reset_route_name, str) or not self.reset_route_name.strip():
            raise ConfigurationError(f'reset_password_route_name is required for entity {name}')

        for attr in ('expiry_days', 'history_limit', 'extension_min_length'):
            value = getattr(self, attr)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(f'{attr} must be a non-negative integer for entity {name}')

        for attr in ('password_field', 'history_field'):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value:
                raise ConfigurationError(f'{attr} must be a non-empty string for entity {name}')

        # The account methods read these class attributes, so they must agree
        for attr, declared_by in (('password_field', '__password_field__'),
                                  ('history_field', '__password_history_field__')):
            declared = getattr(self.entity_class, declared_by, None)
            if declared is not None and declared != getattr(self, attr):
                raise ConfigurationError(
                    f'{attr} "{getattr(self, attr)}" for entity {name} does not match '
                    f'{name}.{declared_by} "{declared}"'
                )

        for attr, label in (('locked_routes', 'notified_route'),
                            ('excluded_routes', 'excluded_notified_route')):
            routes = getattr(self, attr)
            if isinstance(routes, str):
                raise ConfigurationError(f'{label}s for entity {name} must be a list of route names')
            routes = frozenset(routes)
            for route in routes:
                if not isinstance(route, str) or not route:
                    raise ConfigurationError(
                        f'Invalid {label} for entity {name}: routes must be non-empty strings'
                    )
            object.__setattr__(self, attr, routes)

    @property
    def entity_name(self) -> str:
        return f'{self.entity_class.__module__}.{self.entity_class.__qualname__}'

    def is_locked(self, route: str) -> bool:
        return route in self.locked_routes

    def is_excluded(self, route: str) -> bool:
        return route in self.excluded_routes
