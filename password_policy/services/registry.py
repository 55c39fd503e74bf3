# password_policy/services/registry.py
"""Registry of policy configurations keyed by account class"""
from typing import Callable, Dict, List, Optional

from password_policy.exceptions import ConfigurationError
from password_policy.models.policy_config import PolicyConfig


class PolicyRegistry:
    """
    Maps account classes to their ``PolicyConfig``.

    Filled once while the extension initialises and only read afterwards, so
    request threads share it without locking.
    """

    def __init__(self, principal_loader: Optional[Callable[[], object]] = None):
        self._configs: Dict[type, PolicyConfig] = {}
        self.principal_loader = principal_loader

    def add_config(self, config: PolicyConfig) -> None:
        if config.entity_class in self._configs:
            raise ConfigurationError(f'Entity {config.entity_name} is configured twice')
        self._configs[config.entity_class] = config

    def configs(self) -> List[PolicyConfig]:
        return list(self._configs.values())

    def __len__(self):
        return len(self._configs)

    def resolve(self, account_or_class) -> Optional[PolicyConfig]:
        """
        Find the config for an account instance or class

        An exact class match wins; otherwise the first registered config whose
        class is a base of the given one is used. ``None`` resolves to ``None``.
        """
        if account_or_class is None:
            return None
        cls = account_or_class if isinstance(account_or_class, type) else type(account_or_class)

        config = self._configs.get(cls)
        if config is not None:
            return config
        for entity_class, config in self._configs.items():
            if issubclass(cls, entity_class):
                return config
        return None

    def current_principal(self):
        if self.principal_loader is None:
            return None
        return self.principal_loader()

    def resolve_for_current_principal(self) -> Optional[PolicyConfig]:
        return self.resolve(self.current_principal())

    def validate(self) -> None:
        """
        Check cross-config invariants once at startup

        Raises:
            ConfigurationError: two configs share a reset route, or share a
                notified route that is not excluded in both of them
        """
        reset_routes: Dict[str, PolicyConfig] = {}
        notified_routes: Dict[str, PolicyConfig] = {}

        for config in self._configs.values():
            other = reset_routes.get(config.reset_route_name)
            if other is not None:
                raise ConfigurationError(
                    f'Duplicate reset_password_route_name "{config.reset_route_name}" found in '
                    f'entities {other.entity_name} and {config.entity_name}. Each entity must '
                    f'have a unique reset password route.'
                )
            reset_routes[config.reset_route_name] = config

            for route in sorted(config.locked_routes):
                other = notified_routes.get(route)
                if other is not None and not (other.is_excluded(route) and config.is_excluded(route)):
                    raise ConfigurationError(
                        f'Duplicate notified_route "{route}" found in entities {other.entity_name} '
                        f'and {config.entity_name}. Either use unique routes per entity or add '
                        f'the route to excluded_notified_routes in both entities.'
                    )
                notified_routes[route] = config
