"""
Folio - Portfolio & Blog for Flask
==================================

A personal portfolio and blog site backed by a hosted database/auth service:
- Public page with profile, projects and blog posts
- Markdown blog reader
- Password-protected admin panel for editing all of it
- Read-only JSON API

Usage:
    from flask import Flask
    from folio import Folio

    app = Flask(__name__)
    folio = Folio(app)   # reads BACKEND_URL / BACKEND_API_KEY

    # or inject a backend built once at process start
    folio = Folio(app, backend=BackendConfig(url, api_key))
"""

import secrets

from .core.backend import BackendConfig
from .core.config import Config
from .core.data import DataAccess
from .core.logging_service import LoggingService

__version__ = '0.1.0'

__all__ = ['Folio', 'BackendConfig', '__version__']


class Folio:
    """Flask extension wiring the backend, data access and all modules"""

    def __init__(self, app=None, backend=None):
        self.backend = backend
        self.data = None
        self.workspaces = None
        self._registered_modules = []

        if app is not None:
            self.init_app(app, backend=backend)

    def init_app(self, app, backend=None):
        LoggingService.configure(app.config.get('LOG_LEVEL') or Config.LOG_LEVEL)

        if not app.config.get('SECRET_KEY'):
            if Config.SECRET_KEY:
                app.config['SECRET_KEY'] = Config.SECRET_KEY
            else:
                # Sessions will not survive a restart
                app.config['SECRET_KEY'] = secrets.token_hex(32)
                LoggingService.warning('folio', 'FLASK_SECRET_KEY is not set; using a random key')

        # Session security: the admin cookie carries the backend refresh token
        app.config['SESSION_COOKIE_SECURE'] = (app.config.get('SESSION_COOKIE_SECURE')
                                               or app.config.get('FOLIO_SECURE_COOKIES', not app.debug))
        app.config['SESSION_COOKIE_HTTPONLY'] = True
        if not app.config.get('SESSION_COOKIE_SAMESITE'):
            app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

        if backend is not None:
            self.backend = backend
        if self.backend is None:
            with app.app_context():
                self.backend = BackendConfig.from_app_config()

        from .modules.admin.workspace import WorkspaceRegistry

        # The public views share one client; admin browsers get their own
        self.data = DataAccess(self.backend.create_client())
        self.workspaces = WorkspaceRegistry(
            self.backend,
            idle_seconds=int(app.config.get('FOLIO_WORKSPACE_IDLE_SECONDS', 12 * 60 * 60)),
        )

        self._register_modules(app)
        app.extensions['folio'] = self
        LoggingService.info('folio', f"Folio initialised with modules: {', '.join(self._registered_modules)}")

    def _register_modules(self, app):
        from .modules.site import site_bp
        from .modules.blog import blog_bp
        from .modules.admin import admin_bp
        from .modules.api import api_bp
        from .modules.ops import ops_health_bp

        for name, blueprint in (
            ('site', site_bp),
            ('blog', blog_bp),
            ('admin', admin_bp),
            ('api', api_bp),
            ('ops', ops_health_bp),
        ):
            app.register_blueprint(blueprint)
            self._registered_modules.append(name)

    def get_registered_modules(self):
        return list(self._registered_modules)
