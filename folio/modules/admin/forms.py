"""
Admin Form Helpers
==================

Turn submitted admin forms into backend row values, and rows back into
form data for editing.
"""

import re
from datetime import datetime, timezone

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


def create_slug(title):
    """URL-friendly slug: lowercase, every run of other characters becomes one hyphen"""
    slug = _NON_SLUG_CHARS.sub('-', (title or '').lower())
    return slug.strip('-')


def parse_tags(text):
    """Split a comma separated tag field, trimming pieces and dropping empty ones"""
    return [tag.strip() for tag in (text or '').split(',') if tag.strip()]


def format_tags(tags):
    return ', '.join(tags or [])


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat()


def publish_fields(is_published, now=None):
    """published_at follows the flag on every save; an earlier date is never kept"""
    if is_published:
        return {'is_published': True, 'published_at': now or utc_now_iso()}
    return {'is_published': False, 'published_at': None}


def _text(form, key):
    return (form.get(key) or '').strip()


def _optional(form, key):
    return _text(form, key) or None


def _checked(form, key):
    return form.get(key) not in (None, '', False, 'off', 'false', '0')


def _integer(form, key, label, errors, default=None, minimum=None):
    raw = _text(form, key)
    if not raw:
        if default is None:
            errors[key] = f"{label} is required"
        return default
    try:
        value = int(raw)
    except ValueError:
        errors[key] = f"{label} must be a whole number"
        return default
    if minimum is not None and value < minimum:
        errors[key] = f"{label} must be at least {minimum}"
    return value


# ===== Projects =====

def project_values_from_form(form):
    """Returns (values, errors) for a submitted project form"""
    errors = {}
    title = _text(form, 'title')
    description = _text(form, 'description')

    if not title:
        errors['title'] = 'Title is required'
    if not description:
        errors['description'] = 'Description is required'

    values = {
        'title': title,
        'description': description,
        'tags': parse_tags(form.get('tags')),
        'url': _optional(form, 'url'),
        'github_url': _optional(form, 'github_url'),
        'image_url': _optional(form, 'image_url'),
        'display_order': _integer(form, 'display_order', 'Display order', errors, default=0),
        'is_visible': _checked(form, 'is_visible'),
    }
    return values, errors


def project_form_data(project=None):
    """Form fields for a project; a new project starts visible"""
    if project is None:
        return {'display_order': '0', 'is_visible': True}
    return {
        'title': project.title,
        'description': project.description,
        'tags': format_tags(project.tags),
        'url': project.url or '',
        'github_url': project.github_url or '',
        'image_url': project.image_url or '',
        'display_order': str(project.display_order),
        'is_visible': project.is_visible,
    }


# ===== Blog posts =====

def blog_post_values_from_form(form, creating, now=None):
    """
    Returns (values, errors) for a submitted blog post form.

    The slug is derived from the title only while creating a post and only
    when no slug was entered; an existing post keeps whatever slug it is given.
    """
    errors = {}
    title = _text(form, 'title')
    slug = _text(form, 'slug')
    description = _text(form, 'description')

    if not title:
        errors['title'] = 'Title is required'
    if creating and not slug:
        slug = create_slug(title)
    if not slug:
        errors['slug'] = 'Slug is required'
    if not description:
        errors['description'] = 'Description is required'

    values = {
        'title': title,
        'slug': slug,
        'description': description,
        'content': form.get('content') or '',
        'read_time': _integer(form, 'read_time', 'Read time', errors, minimum=1),
    }
    values.update(publish_fields(_checked(form, 'is_published'), now=now))
    return values, errors


def blog_post_form_data(post=None):
    """Form fields for a blog post; a new post starts as a 5 minute draft"""
    if post is None:
        return {'read_time': '5', 'is_published': False}
    return {
        'title': post.title,
        'slug': post.slug,
        'description': post.description,
        'content': post.content,
        'read_time': str(post.read_time),
        'is_published': post.is_published,
    }


# ===== Profile =====

def profile_values_from_form(form):
    """Returns (values, errors) for the submitted profile form"""
    errors = {}
    name = _text(form, 'name')
    initials = _text(form, 'initials')

    if not name:
        errors['name'] = 'Name is required'
    if not initials:
        errors['initials'] = 'Initials are required'

    values = {
        'name': name,
        'initials': initials,
        'tagline': _text(form, 'tagline'),
        'about_text': form.get('about_text') or '',
        'is_available_for_work': _checked(form, 'is_available_for_work'),
        'github_url': _optional(form, 'github_url'),
        'linkedin_url': _optional(form, 'linkedin_url'),
        'email': _optional(form, 'email'),
    }
    return values, errors


def profile_form_data(profile):
    if profile is None:
        return {}
    return {
        'name': profile.name,
        'initials': profile.initials,
        'tagline': profile.tagline,
        'about_text': profile.about_text,
        'is_available_for_work': profile.is_available_for_work,
        'github_url': profile.github_url or '',
        'linkedin_url': profile.linkedin_url or '',
        'email': profile.email or '',
    }
