# password_policy/utils/translation.py
"""Message catalogue for the texts the engine shows to end users

Hosts plug in their own ``translator(key, locale=None)`` (for example a
Flask-Babel ``gettext`` wrapper). Without one, keys are looked up in the
English catalogue below and unknown keys are returned unchanged, so a host can
also configure literal messages.
"""
from typing import Dict, Optional, Union

DEFAULT_MESSAGES = {
    'password_policy.title': 'Password expired',
    'password_policy.message': 'Your password has expired. Please change it to continue.',
    'password_policy.reused': 'Cannot change your password to an old one. '
                              'You used this password {days}',
    'password_policy.extension': 'Your new password is too similar to a password '
                                 'you used {days}',
}


def default_translator(key: str, locale: Optional[str] = None) -> str:
    return DEFAULT_MESSAGES.get(key, key)


def translate_message(message: Union[str, Dict[str, str]], translator,
                      locale: Optional[str] = None) -> Union[str, Dict[str, str]]:
    """Translate a plain message or every value of a ``{title, message}`` mapping"""
    if isinstance(message, dict):
        return {key: translator(value, locale) for key, value in message.items()}
    return translator(message, locale)
