"""Password history, reuse and expiry policy for Flask-SQLAlchemy applications"""
from .exceptions import ConfigurationError, PasswordPolicyError, RuntimeContractError, ValidationError
from .extension import PasswordPolicy
from .models import PasswordHistoryMixin, PasswordPolicyMixin, PolicyConfig

__version__ = "1.0.0"

__all__ = ['PasswordPolicy', 'PolicyConfig', 'PasswordPolicyMixin', 'PasswordHistoryMixin',
           'PasswordPolicyError', 'ConfigurationError', 'RuntimeContractError', 'ValidationError']
