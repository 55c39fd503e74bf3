# password_policy/services/expiry_listener.py
"""before_request hook that warns about, and optionally redirects, expired passwords"""
from typing import Callable, Dict, Optional, Union

from flask import flash, redirect, request, url_for
from werkzeug.routing import BuildError

from password_policy.models.events import PasswordExpired
from password_policy.services.event_dispatcher import NullEventDispatcher
from password_policy.services.expiry_service import PasswordExpiryService
from password_policy.services.request_gate import GateDecision, evaluate
from password_policy.utils.log import PolicyLogger
from password_policy.utils.translation import default_translator, translate_message

DEFAULT_ERROR_MSG = {
    'title': 'password_policy.title',
    'message': 'password_policy.message',
}
DEFAULT_ERROR_TYPE = 'error'


class PasswordExpiryListener:
    """
    Gates locked endpoints for accounts whose password expired.

    On an expired hit the (translated) error message is flashed under
    ``error_message_type``. With ``redirect_on_expiry`` the hook also returns a
    redirect to the account's reset endpoint, which makes Flask skip the view.
    A reset endpoint that cannot be built is logged and the request goes on
    with the warning only. A notifier that raises is logged the same way and
    the message is dropped.
    """

    def __init__(self, expiry_service: PasswordExpiryService,
                 error_message: Union[str, Dict[str, str]] = None,
                 error_message_type: str = DEFAULT_ERROR_TYPE,
                 redirect_on_expiry: bool = False,
                 notifier: Optional[Callable] = None,
                 url_generator: Optional[Callable[[str], str]] = None,
                 translator: Optional[Callable] = None,
                 locale_selector: Optional[Callable[[], Optional[str]]] = None,
                 dispatcher=None,
                 policy_logger: Optional[PolicyLogger] = None):
        self.expiry_service = expiry_service
        self.error_message = DEFAULT_ERROR_MSG if error_message is None else error_message
        self.error_message_type = error_message_type
        self.redirect_on_expiry = redirect_on_expiry
        self.notifier = notifier or flash
        self.url_generator = url_generator or url_for
        self.translator = translator or default_translator
        self.locale_selector = locale_selector
        self.dispatcher = dispatcher or NullEventDispatcher()
        self.policy_logger = policy_logger or PolicyLogger()

    def __call__(self):
        return self.check(request.endpoint)

    def check(self, route: Optional[str]):
        """Apply the gate to ``route`` for the current principal; returns a response or None"""
        if route is None:
            return None

        registry = self.expiry_service.registry
        account = registry.current_principal()
        config = registry.resolve(account)
        if config is None or not config.is_locked(route):
            return None

        # Expiry is evaluated for every locked route, excluded or not
        is_expired = self.expiry_service.is_expired(account)
        decision = evaluate(route, config.locked_routes, config.excluded_routes,
                            is_expired, self.redirect_on_expiry)
        if decision is GateDecision.PASS:
            return None

        response = None
        if decision is GateDecision.WARN_AND_REDIRECT:
            try:
                response = redirect(self.url_generator(config.reset_route_name))
            except BuildError:
                # Degrade to a plain warning
                self.policy_logger.log('Reset password route could not be generated',
                                       level='warning', route=config.reset_route_name)

        self._notify()
        self.dispatcher.dispatch(PasswordExpired(account, route, response is not None))
        self.policy_logger.log('Password expired, access to locked route', user_id=account.get_id(),
                               route=route, redirect=response is not None)
        return response

    def _notify(self) -> None:
        locale = self.locale_selector() if self.locale_selector else None
        message = translate_message(self.error_message, self.translator, locale)
        try:
            self.notifier(message, self.error_message_type)
        except Exception as exc:
            # No session to flash into; the request goes on without the message
            self.policy_logger.log('Password expiry notification failed', level='warning',
                                   error=str(exc))
