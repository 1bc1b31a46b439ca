"""
Ops Routes
==========
"""

from datetime import datetime
from urllib.parse import urlsplit

from flask import current_app, jsonify

from . import ops_health_bp


@ops_health_bp.route('/')
@ops_health_bp.route('')
def health():
    """Liveness for uptime monitors; never calls the backend"""
    folio = current_app.extensions['folio']
    return jsonify({
        'status': 'ok',
        'timestamp': datetime.now().isoformat(),
        'checks': {
            'backend_host': urlsplit(folio.backend.url).netloc,
            'admin_workspaces': len(folio.workspaces),
        },
    })
