"""Data types and model contracts of the password policy engine"""
from .contracts import HasPasswordPolicy, PasswordHistoryEntry, is_account, is_account_class
from .events import PasswordChanged, PasswordExpired, PasswordHistoryCreated, PasswordReuseAttempted
from .mixins import PasswordHistoryMixin, PasswordPolicyMixin
from .policy_config import PolicyConfig

__all__ = ['HasPasswordPolicy', 'PasswordHistoryEntry', 'is_account', 'is_account_class',
           'PasswordChanged', 'PasswordExpired', 'PasswordHistoryCreated',
           'PasswordReuseAttempted', 'PasswordHistoryMixin', 'PasswordPolicyMixin',
           'PolicyConfig']
