# password_policy/extension.py
"""Flask extension wiring the policy services into an application"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from flask import current_app, has_app_context
from sqlalchemy import event

from password_policy.config import apply_defaults, build_policy_configs, listener_settings
from password_policy.exceptions import ConfigurationError
from password_policy.services.cache import ExpiryCache
from password_policy.services.change_interceptor import PasswordChangeInterceptor
from password_policy.services.event_dispatcher import EventDispatcher
from password_policy.services.expiry_listener import PasswordExpiryListener
from password_policy.services.expiry_service import PasswordExpiryService
from password_policy.services.history_service import PasswordHistoryService
from password_policy.services.policy_service import PasswordPolicyService
from password_policy.services.registry import PolicyRegistry
from password_policy.services.validator import PasswordPolicyValidator
from password_policy.utils.clock import utcnow
from password_policy.utils.log import DEFAULT_LOGGER_NAME, PolicyLogger
from password_policy.utils.security import verify_password

EXTENSION_NAME = 'password_policy'


class PolicyState:
    """Everything built for one application by ``PasswordPolicy.init_app``"""

    def __init__(self, registry: PolicyRegistry, expiry_service: PasswordExpiryService,
                 policy_service: PasswordPolicyService, validator: PasswordPolicyValidator,
                 listener: PasswordExpiryListener,
                 interceptors: List[PasswordChangeInterceptor]):
        self.registry = registry
        self.expiry_service = expiry_service
        self.policy_service = policy_service
        self.validator = validator
        self.listener = listener
        self.interceptors = interceptors

    def before_flush(self, session, flush_context, instances):
        for interceptor in self.interceptors:
            interceptor.before_flush(session, flush_context, instances)


class PasswordPolicy:
    """
    Password history, reuse and expiry policy for a Flask-SQLAlchemy application

    ::

        db = SQLAlchemy()
        policy = PasswordPolicy()

        def create_app():
            app = Flask(__name__)
            app.config.from_object(config)
            db.init_app(app)
            policy.init_app(app, db, principal_loader=load_current_user)
            return app
    """

    def __init__(self, app=None, db=None, **options):
        self._state: Optional[PolicyState] = None
        self._flush_target = None
        if app is not None:
            self.init_app(app, db, **options)

    def init_app(self, app, db=None, session=None,
                 principal_loader: Optional[Callable[[], object]] = None,
                 verify: Optional[Callable[..., bool]] = None,
                 cache=None,
                 translator: Optional[Callable] = None,
                 locale_selector: Optional[Callable[[], Optional[str]]] = None,
                 notifier: Optional[Callable] = None,
                 url_generator: Optional[Callable[[str], str]] = None,
                 logger: Optional[logging.Logger] = None,
                 clock: Callable[[], datetime] = utcnow) -> PolicyState:
        """
        Load the configuration, build the services and register the hooks

        Raises:
            ConfigurationError: the PASSWORD_POLICY_* settings are invalid, no
                session is available to watch for password changes, or no
                ``principal_loader`` was given
        """
        apply_defaults(app.config)

        target = session if session is not None else getattr(db, 'session', None)
        if target is None:
            raise ConfigurationError('PasswordPolicy needs a Flask-SQLAlchemy instance or a session')
        if principal_loader is None:
            raise ConfigurationError(
                'PasswordPolicy needs a principal_loader returning the current account'
            )

        registry = PolicyRegistry(principal_loader)
        for policy_config in build_policy_configs(app.config['PASSWORD_POLICY_ENTITIES']):
            registry.add_config(policy_config)
        registry.validate()

        settings = listener_settings(app.config['PASSWORD_POLICY_EXPIRY_LISTENER'])
        policy_logger = PolicyLogger(logger or logging.getLogger(DEFAULT_LOGGER_NAME),
                                     enabled=app.config['PASSWORD_POLICY_ENABLE_LOGGING'],
                                     level=app.config['PASSWORD_POLICY_LOG_LEVEL'])
        dispatcher = EventDispatcher()

        cache_ttl = app.config['PASSWORD_POLICY_CACHE_TTL']
        cache_enabled = bool(app.config['PASSWORD_POLICY_ENABLE_CACHE'])
        if cache_enabled and cache is None:
            cache = ExpiryCache(default_timeout=cache_ttl)

        expiry_service = PasswordExpiryService(registry, cache=cache, cache_enabled=cache_enabled,
                                               cache_ttl=cache_ttl, clock=clock)
        policy_service = PasswordPolicyService(verify or verify_password)
        validator = PasswordPolicyValidator(policy_service, registry, translator=translator,
                                            dispatcher=dispatcher, policy_logger=policy_logger,
                                            clock=clock, locale_selector=locale_selector)
        listener = PasswordExpiryListener(expiry_service,
                                          error_message=settings['error_message'],
                                          error_message_type=settings['error_message_type'],
                                          redirect_on_expiry=settings['redirect_on_expiry'],
                                          notifier=notifier, url_generator=url_generator,
                                          translator=translator, locale_selector=locale_selector,
                                          dispatcher=dispatcher, policy_logger=policy_logger)
        history_service = PasswordHistoryService()
        interceptors = [
            PasswordChangeInterceptor(policy_config, history_service, expiry_service, dispatcher,
                                      policy_logger, clock)
            for policy_config in registry.configs()
        ]
        for interceptor in interceptors:
            interceptor.watch()

        state = PolicyState(registry, expiry_service, policy_service, validator, listener,
                            interceptors)
        self._listen(target)

        hooks = app.before_request_funcs.setdefault(None, [])
        if settings['priority'] > 0:
            hooks.insert(0, listener)
        else:
            hooks.append(listener)

        app.extensions[EXTENSION_NAME] = state
        self._state = state
        return state

    def _listen(self, target) -> None:
        # One flush hook per extension; it delegates to the active app's state
        if self._flush_target is not None and self._flush_target is not target:
            event.remove(self._flush_target, 'before_flush', self._before_flush)
            self._flush_target = None
        if self._flush_target is None:
            event.listen(target, 'before_flush', self._before_flush)
            self._flush_target = target

    def _before_flush(self, session, flush_context, instances):
        self.state.before_flush(session, flush_context, instances)

    @property
    def state(self) -> PolicyState:
        if has_app_context():
            state = current_app.extensions.get(EXTENSION_NAME)
            if state is not None:
                return state
        if self._state is None:
            raise RuntimeError('PasswordPolicy.init_app() has not been called')
        return self._state

    def is_password_expired(self, account=None) -> bool:
        """Expiry state of ``account``, or of the current principal when omitted"""
        service = self.state.expiry_service
        if account is None:
            return service.is_password_expired()
        return service.is_expired(account)

    def days_until_expiry(self, account) -> Optional[int]:
        return self.state.expiry_service.days_until_expiry(account)

    def validate_password(self, password: Optional[str], account):
        """Run the reuse validator; returns a ``PolicyViolation`` or None"""
        return self.state.validator.validate(password, account)
