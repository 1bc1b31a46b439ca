"""
Public Site Module
==================

The public portfolio page: profile, visible projects and published posts.
Also carries the shared layout templates used by the other modules.
"""

from flask import Blueprint

site_bp = Blueprint('site', __name__, template_folder='templates')

from . import routes

__all__ = ['site_bp']
