# password_policy/services/event_dispatcher.py
"""Fire-and-forget delivery of policy events to signal receivers"""
import logging

from flask import current_app, has_app_context

from password_policy import signals
from password_policy.models.events import (
    PasswordChanged,
    PasswordExpired,
    PasswordHistoryCreated,
    PasswordReuseAttempted,
)

logger = logging.getLogger(__name__)

EVENT_SIGNALS = {
    PasswordChanged: signals.password_changed,
    PasswordHistoryCreated: signals.password_history_created,
    PasswordExpired: signals.password_expired,
    PasswordReuseAttempted: signals.password_reuse_attempted,
}


class NullEventDispatcher:
    """Dispatcher used when events are disabled: drops everything"""

    def dispatch(self, event) -> None:
        return None


class EventDispatcher:
    """
    Sends events through the blinker signals in ``password_policy.signals``.

    Receivers are called one by one; an exception raised by a receiver is
    logged and does not reach the code that emitted the event.
    """

    def __init__(self, event_signals=None):
        self.event_signals = dict(EVENT_SIGNALS if event_signals is None else event_signals)

    def dispatch(self, event) -> None:
        signal = self.event_signals.get(type(event))
        if signal is None or not signal.receivers:
            return

        sender = current_app._get_current_object() if has_app_context() else None
        for receiver in list(signal.receivers_for(sender)):
            try:
                receiver(sender, event=event)
            except Exception:
                logger.exception('Receiver %r failed handling %s', receiver,
                                 type(event).__name__)
