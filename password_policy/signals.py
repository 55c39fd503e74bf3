# password_policy/signals.py
"""Signals emitted by the password policy engine

Connect to them the same way as to ``flask.signals``::

    from password_policy.signals import password_expired

    @password_expired.connect
    def on_expired(sender, event):
        audit_log.add(event.account, event.route)

``sender`` is the Flask application when one is active, else ``None``.
"""
from blinker import Namespace

_signals = Namespace()

password_changed = _signals.signal('password-changed')
password_history_created = _signals.signal('password-history-created')
password_expired = _signals.signal('password-expired')
password_reuse_attempted = _signals.signal('password-reuse-attempted')
