"""
Public Site Routes
==================
"""

from datetime import date, datetime

from flask import current_app, render_template, request, url_for

from folio.core.config import get_config_value
from folio.core.data import gather
from folio.core.logging_service import LoggingService
from folio.core.models import Profile
from . import site_bp


def default_profile():
    """Profile shown when the backend cannot provide one"""
    return Profile(
        id='',
        name=get_config_value('FOLIO_DEFAULT_NAME'),
        initials=get_config_value('FOLIO_DEFAULT_INITIALS'),
        tagline=get_config_value('FOLIO_DEFAULT_TAGLINE'),
        about_text=get_config_value('FOLIO_DEFAULT_ABOUT'),
        is_available_for_work=True,
        github_url=get_config_value('FOLIO_DEFAULT_GITHUB_URL'),
        linkedin_url=get_config_value('FOLIO_DEFAULT_LINKEDIN_URL'),
        email=get_config_value('FOLIO_DEFAULT_EMAIL'),
    )


def parse_timestamp(value):
    """Parse the backend's ISO-8601 timestamps, tolerating a trailing Z"""
    if not value:
        return None
    text = value.strip().replace('Z', '+00:00')
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
    except ValueError:
        return None


def format_date(value):
    """'2024-01-05T10:00:00+00:00' -> 'January 5, 2024'"""
    parsed = parse_timestamp(value)
    if parsed is None:
        return ''
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


@site_bp.app_template_filter('format_date')
def format_date_filter(value):
    return format_date(value)


@site_bp.app_context_processor
def inject_year():
    return {'current_year': datetime.now().year}


@site_bp.route('/')
def index():
    """Public home page - only visible projects and published posts"""
    data = current_app.extensions['folio'].data
    profile, projects, posts = gather(data.get_profile, data.get_projects, data.get_blog_posts)

    return render_template('site/index.html',
                           profile=profile.data or default_profile(),
                           projects=projects.data or [],
                           posts=posts.data or [])


@site_bp.app_errorhandler(500)
def server_error(error):
    LoggingService.log_error_with_traceback('site', getattr(error, 'original_exception', None) or error,
                                            {'path': request.path})
    return render_template('folio/error.html',
                           heading='Something Went Wrong',
                           message='An unexpected error occurred. Please try again later.',
                           back_url=url_for('site.index'),
                           back_label='Back to Home'), 500
