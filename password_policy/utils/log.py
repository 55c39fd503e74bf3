# password_policy/utils/log.py
"""Policy decision logging with a configurable level and an on/off switch"""
import logging
from typing import Optional

LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'notice': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}

DEFAULT_LOGGER_NAME = 'password_policy'


class PolicyLogger:
    """
    Thin wrapper around a ``logging.Logger``.

    A ``None`` logger or ``enabled=False`` turns every call into a no-op, so
    callers never have to check whether logging was configured.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, enabled: bool = True,
                 level: str = 'info'):
        self.logger = logger
        self.enabled = enabled
        self.level = level

    @classmethod
    def default(cls, enabled: bool = True, level: str = 'info') -> 'PolicyLogger':
        return cls(logging.getLogger(DEFAULT_LOGGER_NAME), enabled=enabled, level=level)

    def log(self, message: str, level: Optional[str] = None, **context) -> None:
        if not self.enabled or self.logger is None:
            return
        levelno = LOG_LEVELS.get((level or self.level).lower(), logging.INFO)
        context['bundle'] = 'password_policy'
        self.logger.log(levelno, '%s %s', message, context)
