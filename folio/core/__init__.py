"""
Folio Core
==========

Configuration, logging, the hosted backend client and the data access layer
shared by every Folio module.
"""

from .config import Config
from .backend import BackendClient, BackendConfig, BackendError, Session
from .data import DataAccess, Result
from .logging_service import LoggingService

__all__ = [
    'Config', 'BackendClient', 'BackendConfig', 'BackendError', 'Session',
    'DataAccess', 'Result', 'LoggingService',
]
