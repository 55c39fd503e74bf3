"""Exceptions raised by the password policy engine"""


class PasswordPolicyError(Exception):
    """Base class for every error raised by this package"""


class ConfigurationError(PasswordPolicyError):
    """
    Structural misconfiguration detected while the extension is initialised.

    Raised for missing or duplicate reset routes, conflicting notified routes,
    unknown entity classes and entity classes that do not provide the account
    methods. Never caught internally: it aborts ``init_app``.
    """


class RuntimeContractError(PasswordPolicyError):
    """A history class lacks a required method or back-reference when first used"""


class ValidationError(PasswordPolicyError):
    """The object handed to the reuse validator is not a policy-managed account"""
