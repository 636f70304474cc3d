"""
Logging setup for the TrustNest API and worker.

Call sites pass request context through ``extra=``; ContextFormatter appends
those fields to the line as ``key=value`` pairs.
"""
import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_RECORD_ATTRS = set(logging.LogRecord('', 0, '', 0, '', (), None).__dict__) | {'message', 'asctime'}


class ContextFormatter(logging.Formatter):
    def format(self, record):
        line = super().format(record)
        context = {
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith('_')
        }
        if not context:
            return line
        pairs = ' '.join(f'{key}={value}' for key, value in sorted(context.items()))
        head, sep, tail = line.partition('\n')
        return f'{head} | {pairs}{sep}{tail}'


def setup_logger(name, level=None):
    if level is None:
        level = logging.DEBUG if os.environ.get('FLASK_ENV') == 'development' else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Already configured by an earlier app in this process
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ContextFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def log_error(logger, error, context=None):
    """Error line naming the exception type, with optional context fields"""
    logger.error(f"{type(error).__name__}: {error}", extra=dict(context or {}))


def log_user_action(logger, user_id, action, details=None):
    logger.info(f"user {user_id} {action}", extra=dict(details or {}, user_id=user_id))


def log_audit(logger, admin_id, action, details=None):
    """Mirror of an audit log entry; the database row stays authoritative"""
    logger.info(f"AUDIT {action}", extra=dict(details or {}, admin_id=admin_id))
