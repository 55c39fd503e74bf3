# password_policy/services/validator.py
"""Reuse validation run before a new password is accepted"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from password_policy.exceptions import ValidationError
from password_policy.models.contracts import is_account
from password_policy.models.events import PasswordReuseAttempted
from password_policy.services.event_dispatcher import NullEventDispatcher
from password_policy.services.policy_service import PasswordPolicyService
from password_policy.services.registry import PolicyRegistry
from password_policy.utils.clock import days_ago, humanize_days_ago, utcnow
from password_policy.utils.log import PolicyLogger
from password_policy.utils.translation import default_translator

PASSWORD_IN_HISTORY = 'PASSWORD_IN_HISTORY'
PASSWORD_EXTENSION = 'PASSWORD_EXTENSION'

MESSAGE_KEYS = {
    PASSWORD_IN_HISTORY: 'password_policy.reused',
    PASSWORD_EXTENSION: 'password_policy.extension',
}


@dataclass(frozen=True)
class PolicyViolation:
    code: str
    message: str
    entry: Any


class PasswordPolicyValidator:
    """
    Rejects passwords found in an account's history.

    Exact reuse is always checked. Trivial variants of old passwords are
    checked too when the account's policy enables extension detection.
    """

    def __init__(self, policy_service: PasswordPolicyService, registry: PolicyRegistry,
                 translator: Optional[Callable] = None, dispatcher=None,
                 policy_logger: Optional[PolicyLogger] = None,
                 clock: Callable[[], datetime] = utcnow,
                 locale_selector: Optional[Callable[[], Optional[str]]] = None):
        self.policy_service = policy_service
        self.registry = registry
        self.translator = translator or default_translator
        self.dispatcher = dispatcher or NullEventDispatcher()
        self.policy_logger = policy_logger or PolicyLogger()
        self.clock = clock
        self.locale_selector = locale_selector

    def validate(self, value: Optional[str], account) -> Optional[PolicyViolation]:
        """
        Validate that ``value`` has not been used by ``account`` before

        Returns:
            A ``PolicyViolation`` describing the match, or None

        Raises:
            ValidationError: ``account`` is not a policy-managed account
        """
        if value is None:
            return None
        if not is_account(account):
            raise ValidationError(
                f'Expected validation entity to implement the password policy account '
                f'methods, got {type(account).__name__}'
            )

        code = PASSWORD_IN_HISTORY
        entry = self.policy_service.get_history_by_password(value, account)
        if entry is None:
            config = self.registry.resolve(account)
            if config is not None and config.detect_extensions:
                code = PASSWORD_EXTENSION
                entry = self.policy_service.get_history_by_extension(
                    value, account, config.extension_min_length)
        if entry is None:
            return None

        now = self.clock()
        self.dispatcher.dispatch(PasswordReuseAttempted(account, entry))
        self.policy_logger.log('Password reuse attempt detected',
                               user_id=account.get_id(),
                               user_identifier=_identifier(account),
                               password_used_days_ago=days_ago(entry.get_created_at(), now),
                               code=code)

        locale = self.locale_selector() if self.locale_selector else None
        template = self.translator(MESSAGE_KEYS[code], locale)
        message = template.format(days=humanize_days_ago(entry.get_created_at(), now))
        return PolicyViolation(code, message, entry)


def _identifier(account) -> str:
    for attr in ('username', 'email'):
        value = getattr(account, attr, None)
        if value:
            return str(value)
    return 'unknown'
