"""
Admin Module
============

Password-protected content management for the portfolio.

Provides:
- Sign in / sign out against the hosted backend's auth
- Projects list with create, edit and delete
- Blog posts list with create, edit, delete and draft/publish
- Profile editor
"""

from flask import Blueprint

admin_bp = Blueprint(
    'admin',
    __name__,
    url_prefix='/admin',
    template_folder='templates'
)

from . import routes

__all__ = ['admin_bp']
