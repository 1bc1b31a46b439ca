"""
Folio logging.
Every component logs through LoggingService under the `folio.<source>`
logger tree; lines carry the request path and client IP when a request is
being handled.
"""

import json
import logging
import traceback
from flask import request, has_request_context

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


class LoggingService:
    """Source-tagged logging for backend calls, admin actions and security events"""

    ROOT = 'folio'

    @staticmethod
    def configure(level='INFO'):
        """Attach a stream handler to the folio logger tree (once) and set its level"""
        root = logging.getLogger(LoggingService.ROOT)
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root.addHandler(handler)
        root.setLevel(str(level).upper())
        return root

    @staticmethod
    def get_logger(source):
        return logging.getLogger(f"{LoggingService.ROOT}.{source}")

    @staticmethod
    def _client_and_path():
        if not has_request_context():
            return None, None
        forwarded = request.headers.get('X-Forwarded-For', '')
        # First hop is the client when behind a proxy
        client = forwarded.split(',')[0].strip() or request.remote_addr
        return client, request.path

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Write one line to the `folio.<source>` logger.

        Args:
            level (int): logging level, e.g. logging.WARNING
            source (str): component name (backend, admin, site, security...)
            message (str): what happened
            details (dict/str): extra context, JSON-encoded when a dict
            user_id (str): the admin email, when known
        """
        client, path = LoggingService._client_and_path()
        if isinstance(details, dict):
            details = json.dumps(details, default=str, sort_keys=True)

        extras = [
            ('path', path),
            ('ip', client),
            ('user', user_id),
            ('details', details),
        ]
        line = ' | '.join([message] + [f"{key}={value}" for key, value in extras if value])
        LoggingService.get_logger(source).log(level, line)

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        LoggingService.log(logging.DEBUG, source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        LoggingService.log(logging.INFO, source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        LoggingService.log(logging.WARNING, source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        LoggingService.log(logging.ERROR, source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """An admin changed something: sign-in, create, update, delete"""
        LoggingService.info(source, f"Admin action: {action}", details, user_id)

    @staticmethod
    def log_security_event(message, details=None):
        """Failed sign-ins and similar, under folio.security"""
        LoggingService.warning('security', message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Unexpected exception, with the traceback currently being handled"""
        payload = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc(),
        }
        if details:
            payload['additional_details'] = details
        LoggingService.error(source, f"Unhandled {type(error).__name__}", payload)

