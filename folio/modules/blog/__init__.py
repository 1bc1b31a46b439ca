"""
Blog Reader Module
==================

Public page for a single published post, rendered from markdown.
"""

from flask import Blueprint

blog_bp = Blueprint('blog', __name__, url_prefix='/blog', template_folder='templates')

from . import routes

__all__ = ['blog_bp']
