# password_policy/services/policy_service.py
"""Detection of reused passwords against an account's history"""
import string
from typing import Callable, Iterator, Optional

from password_policy.models.contracts import HasPasswordPolicy, PasswordHistoryEntry
from password_policy.utils.security import verify_password

# Characters users typically tack onto an old password
EXTENSION_ALPHABET = string.digits + '!@#$%'
MAX_DIGIT_RUN = 3
# Upper bound of the enumeration: one single-char suffix, one prefix, then one
# run per length 2..MAX_DIGIT_RUN on each side
MAX_EXTENSION_CANDIDATES = 2 + 2 * (MAX_DIGIT_RUN - 1)


def extension_candidates(password: str, min_base_length: int) -> Iterator[str]:
    """
    Yield the passwords ``password`` may have been derived from

    Order: one trailing character from ``EXTENSION_ALPHABET``, one leading
    character, a trailing run of 2-3 digits, a leading run of 2-3 digits.
    Remainders shorter than ``min_base_length`` and repeats are skipped, so at
    most ``MAX_EXTENSION_CANDIDATES`` values are produced.
    """
    seen = set()

    def keep(base: str) -> bool:
        if len(base) < max(min_base_length, 1) or base in seen:
            return False
        seen.add(base)
        return True

    def generate() -> Iterator[str]:
        if password and password[-1] in EXTENSION_ALPHABET:
            yield password[:-1]
        if password and password[0] in EXTENSION_ALPHABET:
            yield password[1:]
        for size in range(2, MAX_DIGIT_RUN + 1):
            if len(password) > size and password[-size:].isdigit():
                yield password[:-size]
        for size in range(2, MAX_DIGIT_RUN + 1):
            if len(password) > size and password[:size].isdigit():
                yield password[size:]

    for base in generate():
        if keep(base):
            yield base


class PasswordPolicyService:
    """
    Matches candidate passwords against archived hashes.

    Hashes are only ever checked through the ``verify`` capability
    (``verify(plain, hashed, salt=None) -> bool``), never compared as strings.
    """

    def __init__(self, verify: Callable[..., bool] = verify_password):
        self.verify = verify

    def _matches(self, password: str, entry: PasswordHistoryEntry) -> bool:
        hashed = entry.get_password()
        if not hashed:
            return False
        return bool(self.verify(password, hashed, entry.get_salt()))

    def get_history_by_password(self, password: str,
                                account: HasPasswordPolicy) -> Optional[PasswordHistoryEntry]:
        """First history entry, in stored order, that ``password`` verifies against"""
        if not password:
            return None
        for entry in account.get_password_history():
            if self._matches(password, entry):
                return entry
        return None

    def get_history_by_extension(self, password: str, account: HasPasswordPolicy,
                                 min_base_length: int) -> Optional[PasswordHistoryEntry]:
        """
        Best-effort check that ``password`` is an old password plus a trivial
        prefix or suffix (``Summer2023`` -> ``Summer2023!``, ``Summer202399``).

        This is a heuristic: variants outside the enumerated patterns are not
        detected. Each candidate costs one verify call per history entry.
        """
        if not password:
            return None
        history = list(account.get_password_history())
        if not history:
            return None
        for base in extension_candidates(password, min_base_length):
            for entry in history:
                if self._matches(base, entry):
                    return entry
        return None

    def is_password_in_history(self, password: str, account: HasPasswordPolicy,
                               detect_extensions: bool = False,
                               min_base_length: int = 4) -> bool:
        """Check if password exists in the account's password history"""
        if self.get_history_by_password(password, account) is not None:
            return True
        if detect_extensions:
            return self.get_history_by_extension(password, account, min_base_length) is not None
        return False
