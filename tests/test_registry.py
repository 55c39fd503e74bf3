"""Test config lookup by account class"""
import pytest

from conftest import FakeAccount
from password_policy import ConfigurationError, PolicyConfig
from password_policy.services.registry import PolicyRegistry


class Admin(FakeAccount):
    pass


class SuperAdmin(Admin):
    pass


def test_exact_class_wins_over_base():
    registry = PolicyRegistry()
    base = PolicyConfig(FakeAccount, 'account.reset')
    admin = PolicyConfig(Admin, 'admin.reset')
    registry.add_config(base)
    registry.add_config(admin)

    assert registry.resolve(FakeAccount()) is base
    assert registry.resolve(Admin()) is admin
    assert registry.resolve(Admin) is admin
    assert registry.resolve(None) is None


def test_subclass_resolves_to_base_config():
    registry = PolicyRegistry()
    admin = PolicyConfig(Admin, 'admin.reset')
    registry.add_config(admin)

    assert registry.resolve(SuperAdmin()) is admin
    assert registry.resolve(object()) is None


def test_same_class_twice_rejected():
    registry = PolicyRegistry()
    registry.add_config(PolicyConfig(Admin, 'admin.reset'))

    with pytest.raises(ConfigurationError):
        registry.add_config(PolicyConfig(Admin, 'other.reset'))
    assert len(registry) == 1


def test_current_principal():
    account = Admin()
    registry = PolicyRegistry(principal_loader=lambda: account)
    config = PolicyConfig(Admin, 'admin.reset')
    registry.add_config(config)

    assert registry.current_principal() is account
    assert registry.resolve_for_current_principal() is config
    assert PolicyRegistry().current_principal() is None
