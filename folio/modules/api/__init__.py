"""
Public API Module
=================

Read-only JSON for the public content, with CORS headers so other sites
can embed projects and posts.

Provides:
- /api/profile
- /api/projects
- /api/posts and /api/posts/<slug>
"""

from flask import Blueprint

api_bp = Blueprint('api', __name__, url_prefix='/api')

from . import routes

__all__ = ['api_bp']
