import os
from dotenv import load_dotenv

load_dotenv(override=True)

class Config:
    """
    Base configuration for Folio.
    The hosted backend endpoint and key come from environment variables.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Hosted backend (row storage + auth)
    BACKEND_URL = os.getenv('BACKEND_URL') or os.getenv('SUPABASE_URL')
    BACKEND_API_KEY = os.getenv('BACKEND_API_KEY') or os.getenv('SUPABASE_ANON_KEY')
    # Seconds; unset means requests waits as long as the backend does
    BACKEND_TIMEOUT = os.getenv('BACKEND_TIMEOUT')

    # Table names
    PROFILE_TABLE = "profile"
    PROJECTS_TABLE = "projects"
    BLOG_POSTS_TABLE = "blog_posts"

    # Profile shown on the public page when the backend has none to give
    FOLIO_DEFAULT_NAME = os.getenv('FOLIO_DEFAULT_NAME', 'Your Name')
    FOLIO_DEFAULT_INITIALS = os.getenv('FOLIO_DEFAULT_INITIALS', 'YN')
    FOLIO_DEFAULT_TAGLINE = os.getenv(
        'FOLIO_DEFAULT_TAGLINE',
        'Software Developer passionate about building products that make a difference.'
    )
    FOLIO_DEFAULT_ABOUT = os.getenv('FOLIO_DEFAULT_ABOUT', 'Welcome to my corner of the internet!')
    FOLIO_DEFAULT_GITHUB_URL = os.getenv('FOLIO_DEFAULT_GITHUB_URL')
    FOLIO_DEFAULT_LINKEDIN_URL = os.getenv('FOLIO_DEFAULT_LINKEDIN_URL')
    FOLIO_DEFAULT_EMAIL = os.getenv('FOLIO_DEFAULT_EMAIL')

    # Level for the folio.* loggers
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Port for local server (optional, projects can set this)
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
