# password_policy/models/events.py
"""Payloads of the informational events the engine emits"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PasswordChanged:
    """A password change was recorded for ``account``"""
    account: Any
    changed_at: datetime


@dataclass(frozen=True)
class PasswordHistoryCreated:
    """``entry`` was archived; ``removed_count`` older entries were evicted"""
    account: Any
    entry: Any
    removed_count: int = 0


@dataclass(frozen=True)
class PasswordExpired:
    """An expired account hit a locked route"""
    account: Any
    route: str
    will_redirect: bool = False


@dataclass(frozen=True)
class PasswordReuseAttempted:
    """A candidate password matched (or extended) ``entry``"""
    account: Any
    entry: Any
