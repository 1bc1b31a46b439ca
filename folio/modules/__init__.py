"""
Folio Modules
=============

Flask blueprint modules for the public site and the admin panel.
"""

__all__ = ['admin', 'api', 'blog', 'ops', 'site']
