# password_policy/services/change_interceptor.py
"""Archives the previous password whenever an account's password changes

The interceptor is registered as a SQLAlchemy ``before_flush`` listener on the
host's session, so the history row, the evictions and the account's
``password_changed_at`` update are all written by the same flush, inside the
same transaction, as the password change itself.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from sqlalchemy import event
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import QueryableAttribute

from password_policy.exceptions import RuntimeContractError
from password_policy.models.contracts import HISTORY_METHODS, HasPasswordPolicy, missing_methods
from password_policy.models.events import PasswordChanged, PasswordHistoryCreated
from password_policy.models.policy_config import PolicyConfig
from password_policy.services.event_dispatcher import NullEventDispatcher
from password_policy.services.history_service import PasswordHistoryService
from password_policy.utils.clock import utcnow
from password_policy.utils.log import PolicyLogger

logger = logging.getLogger(__name__)


def _load_replaced_value(target, value, oldvalue, initiator):
    # Registered with active_history: SQLAlchemy then loads an expired hash
    # before overwriting it, so the flush sees the old value
    return None


class FlushContext:
    """Hashes archived during one flush cycle"""

    def __init__(self):
        self.processed: Dict[str, object] = {}

    def __contains__(self, password_hash: str) -> bool:
        return password_hash in self.processed

    def remember(self, password_hash: str, entry) -> None:
        self.processed[password_hash] = entry


class PasswordChangeInterceptor:
    """Creates one history entry per detected password change of ``config.entity_class``"""

    def __init__(self, config: PolicyConfig, history_service: Optional[PasswordHistoryService] = None,
                 expiry_service=None, dispatcher=None, policy_logger: Optional[PolicyLogger] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.config = config
        self.history_service = history_service or PasswordHistoryService()
        self.expiry_service = expiry_service
        self.dispatcher = dispatcher or NullEventDispatcher()
        self.policy_logger = policy_logger or PolicyLogger()
        self.clock = clock
        self._targets: Dict[type, Tuple[type, str]] = {}

    def watch(self) -> None:
        """Make the mapped password attribute keep its previous value when set"""
        attribute = getattr(self.config.entity_class, self.config.password_field, None)
        if not isinstance(attribute, QueryableAttribute):
            return
        if not event.contains(attribute, 'set', _load_replaced_value):
            event.listen(attribute, 'set', _load_replaced_value, active_history=True,
                         propagate=True)

    def before_flush(self, session, flush_context, instances) -> None:
        """SQLAlchemy ``before_flush`` hook"""
        context = FlushContext()
        with session.no_autoflush:
            for account in list(session.dirty):
                if not isinstance(account, self.config.entity_class):
                    continue
                changed, old_hash = self._password_change(account)
                if changed:
                    self.on_password_changed(account, old_hash, context, session=session)

    def _password_change(self, account) -> Tuple[bool, Optional[str]]:
        state = sa_inspect(account)
        if self.config.password_field not in state.attrs:
            return False, None
        history = state.attrs[self.config.password_field].history
        if not history.has_changes():
            return False, None
        return True, (history.deleted[0] if history.deleted else None)

    def on_password_changed(self, account: HasPasswordPolicy, old_hash: Optional[str],
                            context: Optional[FlushContext] = None, session=None):
        """
        Archive ``old_hash`` for ``account`` and prune its history

        Args:
            account: Account whose password field changed
            old_hash: Hash before the change; when empty the account's current
                hash is archived instead
            context: Batch state shared by one flush; a hash already archived
                in it is skipped
            session: Session the flush runs in, used to delete evicted rows

        Returns:
            The new history entry, or None when nothing was archived

        Raises:
            RuntimeContractError: the history class cannot be built or linked
        """
        if context is None:
            context = FlushContext()

        if not old_hash:
            old_hash = account.get_password()
        if not old_hash:
            return None
        if old_hash in context:
            return None

        history_class, back_reference = self._history_target(account)
        now = self.clock()

        entry = history_class()
        setattr(entry, back_reference, account)
        entry.set_password(old_hash)
        entry.set_created_at(now)
        account.add_password_history(entry)
        context.remember(old_hash, entry)

        stale = self.history_service.cleanup(account, self.config.history_limit)
        if session is not None:
            for item in stale:
                if sa_inspect(item).persistent:
                    session.delete(item)
                elif item in session:
                    session.expunge(item)
            if entry not in stale:
                session.add(entry)

        previous_changed_at = account.get_password_changed_at()
        account.set_password_changed_at(now)
        if self.expiry_service is not None:
            self.expiry_service.invalidate(account, previous_changed_at)

        self.dispatcher.dispatch(PasswordHistoryCreated(account, entry, len(stale)))
        self.dispatcher.dispatch(PasswordChanged(account, now))
        self.policy_logger.log('Password history entry created', user_id=account.get_id(),
                               removed_entries=len(stale))
        return entry

    def _history_target(self, account) -> Tuple[type, str]:
        """History class and back-reference attribute, resolved once per account class"""
        cls = type(account)
        target = self._targets.get(cls)
        if target is not None:
            return target

        field = self.config.history_field
        try:
            mapper = sa_inspect(cls)
        except NoInspectionAvailable:
            raise RuntimeContractError(f'{cls.__name__} is not a mapped class') from None
        if field not in mapper.relationships:
            raise RuntimeContractError(
                f'{cls.__name__}.{field} is not a relationship to a password history class'
            )

        relationship = mapper.relationships[field]
        history_class = relationship.mapper.class_
        missing = missing_methods(history_class, HISTORY_METHODS)
        if missing:
            raise RuntimeContractError(
                f"{history_class.__name__} must implement the password history methods: "
                f"{', '.join(missing)}"
            )

        back_reference = relationship.back_populates
        if not back_reference and relationship.backref:
            backref = relationship.backref
            back_reference = backref if isinstance(backref, str) else backref[0]
        if not back_reference or not hasattr(history_class, back_reference):
            raise RuntimeContractError(
                f'Cannot set account relation in password history class {history_class.__name__}: '
                f'{cls.__name__}.{field} declares no back reference'
            )

        logger.debug('Resolved history class %s via %s.%s', history_class.__name__,
                     cls.__name__, field)
        target = (history_class, back_reference)
        self._targets[cls] = target
        return target
