"""Utility functions shared by the policy services"""
from .clock import utcnow, to_naive_utc
from .log import PolicyLogger
from .security import hash_password, verify_password
from .translation import default_translator

__all__ = ['utcnow', 'to_naive_utc', 'PolicyLogger', 'hash_password', 'verify_password',
           'default_translator']
