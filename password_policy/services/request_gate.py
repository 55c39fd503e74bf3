# password_policy/services/request_gate.py
"""Per-request gating decision for expired passwords"""
from enum import Enum
from typing import AbstractSet, Optional


class GateDecision(Enum):
    PASS = 'pass'
    WARN = 'warn'
    WARN_AND_REDIRECT = 'warn_and_redirect'


def evaluate(route: Optional[str], locked_routes: AbstractSet[str],
             excluded_routes: AbstractSet[str], is_expired: bool,
             redirect_on_expiry: bool = False) -> GateDecision:
    """
    Decide what to do with a request to ``route``

    Checked in order: anonymous route, route not locked, route excluded,
    password not expired; any of those passes. An excluded route passes even
    when it is also locked, so the reset and logout pages stay reachable.

    ``WARN_AND_REDIRECT`` is only a request to redirect: the caller still has to
    resolve the reset route and falls back to ``WARN`` if that fails.
    """
    if route is None:
        return GateDecision.PASS
    if route not in locked_routes:
        return GateDecision.PASS
    if route in excluded_routes:
        return GateDecision.PASS
    if not is_expired:
        return GateDecision.PASS
    if redirect_on_expiry:
        return GateDecision.WARN_AND_REDIRECT
    return GateDecision.WARN
