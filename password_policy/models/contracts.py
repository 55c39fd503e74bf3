# password_policy/models/contracts.py
"""Capability contracts for policy-managed accounts and their history entries

The engine works against these method sets rather than concrete models. They
are checked once, reflectively: account classes when the configuration is
loaded, history classes the first time an entry is created.
"""
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, runtime_checkable

ACCOUNT_METHODS = (
    'get_id',
    'get_password',
    'set_password',
    'get_password_changed_at',
    'set_password_changed_at',
    'get_password_history',
    'add_password_history',
    'remove_password_history',
)

HISTORY_METHODS = (
    'get_password',
    'set_password',
    'get_created_at',
    'set_created_at',
    'get_salt',
    'set_salt',
)


@runtime_checkable
class PasswordHistoryEntry(Protocol):
    """One archived password hash"""

    def get_password(self) -> str: ...

    def set_password(self, password: str) -> None: ...

    def get_created_at(self) -> Optional[datetime]: ...

    def set_created_at(self, created_at: datetime) -> None: ...

    def get_salt(self) -> Optional[str]: ...

    def set_salt(self, salt: Optional[str]) -> None: ...


@runtime_checkable
class HasPasswordPolicy(Protocol):
    """An account whose password is subject to the policy"""

    def get_id(self): ...

    def get_password(self) -> Optional[str]: ...

    def set_password(self, password: str) -> None: ...

    def get_password_changed_at(self) -> Optional[datetime]: ...

    def set_password_changed_at(self, changed_at: datetime) -> None: ...

    def get_password_history(self) -> List[PasswordHistoryEntry]: ...

    def add_password_history(self, entry: PasswordHistoryEntry) -> None: ...

    def remove_password_history(self, entry: PasswordHistoryEntry) -> None: ...


def missing_methods(cls: type, names: Iterable[str]) -> List[str]:
    """Names from ``names`` that ``cls`` does not provide as callables"""
    return [name for name in names if not callable(getattr(cls, name, None))]


def is_account_class(cls: type) -> bool:
    return isinstance(cls, type) and not missing_methods(cls, ACCOUNT_METHODS)


def is_account(obj) -> bool:
    return obj is not None and is_account_class(type(obj))
