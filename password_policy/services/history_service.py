# password_policy/services/history_service.py
"""Password history retention"""
from datetime import datetime
from typing import List, Sequence

from password_policy.models.contracts import HasPasswordPolicy, PasswordHistoryEntry
from password_policy.utils.clock import to_naive_utc


def _created_at(entry: PasswordHistoryEntry) -> datetime:
    # Entries without a timestamp count as the oldest
    return to_naive_utc(entry.get_created_at()) or datetime.min


class PasswordHistoryService:
    """Decides which archived passwords fall outside the retention limit"""

    @staticmethod
    def select_stale_entries(history: Sequence[PasswordHistoryEntry],
                             limit: int) -> List[PasswordHistoryEntry]:
        """
        Select entries to evict so that at most ``limit`` remain

        Entries are ordered newest first by creation time. ``sorted`` is stable,
        so entries sharing a timestamp keep the order the history source gave
        them, and the later ones in that order are evicted first. The input is
        not modified.

        Args:
            history: Archived entries of one account
            limit: Number of entries to retain (0 evicts everything)

        Returns:
            Entries beyond ``limit``, newest first
        """
        if limit < 0:
            raise ValueError('History limit cannot be negative')
        entries = list(history)
        if len(entries) <= limit:
            return []

        ordered = sorted(entries, key=_created_at, reverse=True)
        return ordered[limit:]

    def cleanup(self, account: HasPasswordPolicy, limit: int) -> List[PasswordHistoryEntry]:
        """Detach stale entries from ``account`` and return them"""
        stale = self.select_stale_entries(account.get_password_history(), limit)
        for entry in stale:
            account.remove_password_history(entry)
        return stale
