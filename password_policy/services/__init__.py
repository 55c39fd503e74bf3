"""Service layer of the password policy engine"""
from .cache import ExpiryCache
from .change_interceptor import FlushContext, PasswordChangeInterceptor
from .event_dispatcher import EventDispatcher, NullEventDispatcher
from .expiry_listener import PasswordExpiryListener
from .expiry_service import PasswordExpiryService
from .history_service import PasswordHistoryService
from .policy_service import PasswordPolicyService
from .registry import PolicyRegistry
from .request_gate import GateDecision
from .validator import PasswordPolicyValidator, PolicyViolation

__all__ = ['ExpiryCache', 'FlushContext', 'PasswordChangeInterceptor', 'EventDispatcher',
           'NullEventDispatcher', 'PasswordExpiryListener', 'PasswordExpiryService',
           'PasswordHistoryService', 'PasswordPolicyService', 'PolicyRegistry', 'GateDecision',
           'PasswordPolicyValidator', 'PolicyViolation']
