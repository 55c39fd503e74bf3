# password_policy/config.py
"""Configuration defaults and loading for the password policy extension

Settings are read once from ``app.config`` when the extension initialises::

    PASSWORD_POLICY_ENTITIES = {
        'myapp.models.User': {
            'password_field': 'password_hash',
            'password_history_field': 'password_history',
            'passwords_to_remember': 5,
            'expiry_days': 90,
            'reset_password_route_name': 'auth.change_password',
            'notified_routes': ['dashboard.index', 'auth.change_password'],
            'excluded_notified_routes': ['auth.change_password'],
            'detect_password_extensions': True,
            'extension_min_length': 4,
        },
    }
"""
from typing import Any, Dict, List, Mapping

from werkzeug.utils import ImportStringError, import_string

from password_policy.exceptions import ConfigurationError
from password_policy.models.policy_config import (
    DEFAULT_EXPIRY_DAYS,
    DEFAULT_EXTENSION_MIN_LENGTH,
    DEFAULT_HISTORY_FIELD,
    DEFAULT_PASSWORD_FIELD,
    DEFAULT_PASSWORDS_TO_REMEMBER,
    PolicyConfig,
)
from password_policy.services.expiry_listener import DEFAULT_ERROR_MSG, DEFAULT_ERROR_TYPE
from password_policy.services.expiry_service import DEFAULT_CACHE_TTL

DEFAULT_EXPIRY_LISTENER_PRIORITY = 0


class Config:
    """Default values for every PASSWORD_POLICY_* setting"""
    PASSWORD_POLICY_ENTITIES: Dict[Any, Dict[str, Any]] = {}

    PASSWORD_POLICY_EXPIRY_LISTENER = {
        'priority': DEFAULT_EXPIRY_LISTENER_PRIORITY,
        'redirect_on_expiry': False,
        'error_msg': {
            'text': DEFAULT_ERROR_MSG,
            'type': DEFAULT_ERROR_TYPE,
        },
    }

    # Expiry result cache
    PASSWORD_POLICY_ENABLE_CACHE = False
    PASSWORD_POLICY_CACHE_TTL = DEFAULT_CACHE_TTL

    # Policy decision logging
    PASSWORD_POLICY_ENABLE_LOGGING = True
    PASSWORD_POLICY_LOG_LEVEL = 'info'


def apply_defaults(app_config) -> None:
    """Fill missing PASSWORD_POLICY_* keys of a Flask config from ``Config``"""
    for key in dir(Config):
        if key.startswith('PASSWORD_POLICY_'):
            app_config.setdefault(key, getattr(Config, key))


def _entity_class(key) -> type:
    if isinstance(key, type):
        return key
    if not isinstance(key, str) or not key:
        raise ConfigurationError(f'Invalid entity key {key!r}: expected a class or an import path')
    try:
        return import_string(key)
    except ImportStringError:
        raise ConfigurationError(f'Entity class {key} not found') from None


def _setting(settings: Mapping[str, Any], name: str, default):
    # An explicit None means "use the default"
    value = settings.get(name)
    return default if value is None else value


def _route_list(settings: Mapping[str, Any], name: str, entity: str) -> List[str]:
    routes = settings.get(name) or []
    if isinstance(routes, str) or not isinstance(routes, (list, tuple, set, frozenset)):
        raise ConfigurationError(f'{name} for entity {entity} must be a list of route names')
    return list(routes)


def build_policy_configs(entities: Mapping[Any, Mapping[str, Any]]) -> List[PolicyConfig]:
    """
    Turn the PASSWORD_POLICY_ENTITIES mapping into ``PolicyConfig`` objects

    Raises:
        ConfigurationError: empty mapping, unknown class, missing reset route,
            malformed route lists or values rejected by ``PolicyConfig``
    """
    if not entities:
        raise ConfigurationError('PASSWORD_POLICY_ENTITIES must configure at least one entity')

    configs = []
    for key, settings in entities.items():
        entity_class = _entity_class(key)
        entity = entity_class.__name__
        if not isinstance(settings, Mapping):
            raise ConfigurationError(f'Settings for entity {entity} must be a mapping')
        if 'reset_password_route_name' not in settings:
            raise ConfigurationError(f'reset_password_route_name is required for entity {entity}')

        configs.append(PolicyConfig(
            entity_class=entity_class,
            reset_route_name=settings['reset_password_route_name'],
            expiry_days=_setting(settings, 'expiry_days', DEFAULT_EXPIRY_DAYS),
            password_field=_setting(settings, 'password_field',
                                    getattr(entity_class, '__password_field__',
                                            DEFAULT_PASSWORD_FIELD)),
            history_field=_setting(settings, 'password_history_field',
                                   getattr(entity_class, '__password_history_field__',
                                           DEFAULT_HISTORY_FIELD)),
            history_limit=_setting(settings, 'passwords_to_remember', DEFAULT_PASSWORDS_TO_REMEMBER),
            locked_routes=_route_list(settings, 'notified_routes', entity),
            excluded_routes=_route_list(settings, 'excluded_notified_routes', entity),
            detect_extensions=bool(settings.get('detect_password_extensions', False)),
            extension_min_length=_setting(settings, 'extension_min_length',
                                          DEFAULT_EXTENSION_MIN_LENGTH),
        ))
    return configs


def listener_settings(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalise PASSWORD_POLICY_EXPIRY_LISTENER, filling in defaults"""
    raw = raw or {}
    error_msg = raw.get('error_msg') or {}
    text = _setting(error_msg, 'text', DEFAULT_ERROR_MSG)
    if not isinstance(text, (str, dict)) or not text:
        raise ConfigurationError('error_msg.text must be a string or a {title, message} mapping')

    priority = _setting(raw, 'priority', DEFAULT_EXPIRY_LISTENER_PRIORITY)
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ConfigurationError('expiry listener priority must be an integer')

    return {
        'priority': priority,
        'redirect_on_expiry': bool(raw.get('redirect_on_expiry', False)),
        'error_message': text,
        'error_message_type': _setting(error_msg, 'type', DEFAULT_ERROR_TYPE),
    }
