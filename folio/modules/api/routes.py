"""
Public API Routes
=================
"""

from flask import current_app, jsonify
from flask_cors import cross_origin

from . import api_bp


def _data():
    return current_app.extensions['folio'].data


def _error(result, status=502):
    return jsonify({'error': result.error}), status


@api_bp.route('/profile', methods=['GET'])
@cross_origin()
def get_profile():
    result = _data().get_profile()
    if not result.ok:
        return _error(result)
    return jsonify(result.data.to_dict())


@api_bp.route('/projects', methods=['GET'])
@cross_origin()
def get_projects():
    """Visible projects in display order"""
    result = _data().get_projects()
    if not result.ok:
        return _error(result)
    return jsonify([project.to_dict() for project in result.data])


@api_bp.route('/posts', methods=['GET'])
@cross_origin()
def get_posts():
    """Published posts, newest first"""
    result = _data().get_blog_posts()
    if not result.ok:
        return _error(result)
    return jsonify([post.to_dict() for post in result.data])


@api_bp.route('/posts/<slug>', methods=['GET'])
@cross_origin()
def get_post(slug):
    result = _data().get_blog_post_by_slug(slug)
    if not result.ok:
        return jsonify({'error': 'Post not found'}), 404
    return jsonify(result.data.to_dict())
