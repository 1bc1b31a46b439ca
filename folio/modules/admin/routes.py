"""
Admin Routes
============

Session-gated content management. Each browser is bound to an
AdminWorkspace; views receive it as their first argument.
"""

from functools import wraps

from flask import (abort, current_app, flash, redirect, render_template, request,
                   session, url_for)

from folio.core.logging_service import LoggingService
from . import admin_bp
from .forms import (blog_post_form_data, blog_post_values_from_form, profile_form_data,
                    profile_values_from_form, project_form_data, project_values_from_form)

WORKSPACE_KEY = 'folio_workspace'
REFRESH_TOKEN_KEY = 'folio_refresh_token'
TABS = ('projects', 'blogs', 'profile')


# ---------------------------------------------------------------------------
# Workspace plumbing
# ---------------------------------------------------------------------------

def _registry():
    return current_app.extensions['folio'].workspaces


def _resolve_workspace():
    """This browser's stored workspace, or a fresh unstored one"""
    workspace = _registry().get(session.get(WORKSPACE_KEY))
    if workspace is None:
        workspace = _registry().create()
    return workspace


def _remember_session(workspace):
    """
    Store signed-in workspaces and keep their refresh token in the cookie so
    a restarted server can restore them; forget everything else.
    """
    if workspace.gate.is_authenticated:
        if workspace.workspace_id is None:
            session[WORKSPACE_KEY] = _registry().register(workspace)
        session[REFRESH_TOKEN_KEY] = workspace.refresh_token
        return

    if workspace.workspace_id is not None:
        _registry().discard(workspace.workspace_id)
    else:
        workspace.close()
    session.pop(WORKSPACE_KEY, None)
    session.pop(REFRESH_TOKEN_KEY, None)


def workspace_view(f):
    """Run the view with this browser's workspace, holding its lock"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        workspace = _resolve_workspace()
        with workspace.lock:
            refresh_token = session.get(REFRESH_TOKEN_KEY)
            if workspace.gate.is_loading:
                workspace.start(refresh_token=refresh_token)
            else:
                workspace.adopt_refresh_token(refresh_token)
                workspace.check_session()
            try:
                return f(workspace, *args, **kwargs)
            finally:
                _remember_session(workspace)
    return decorated_function


def admin_required(f):
    """Decorator to require a signed-in workspace"""
    @wraps(f)
    def decorated_function(workspace, *args, **kwargs):
        if not workspace.gate.is_authenticated:
            flash('Please sign in to continue', 'error')
            return redirect(url_for('admin.index'))
        return f(workspace, *args, **kwargs)
    return decorated_function


@admin_bp.errorhandler(404)
def not_found(error):
    return render_template('folio/error.html',
                           heading='Not Found',
                           message='That item is not in your content list.',
                           back_url=url_for('admin.index'),
                           back_label='Back to Dashboard'), 404


# ---------------------------------------------------------------------------
# Sign in / dashboard
# ---------------------------------------------------------------------------

@admin_bp.route('/')
@workspace_view
def index(workspace):
    """Login form, or the dashboard once signed in"""
    if not workspace.gate.is_authenticated:
        return render_template('admin/login.html', email='')

    tab = request.args.get('tab', 'projects')
    if tab not in TABS:
        tab = 'projects'
    return render_template('admin/dashboard.html',
                           tab=tab,
                           content=workspace.content,
                           user_email=workspace.gate.session.email)


@admin_bp.route('/login', methods=['GET', 'POST'])
@workspace_view
def login(workspace):
    """Password sign-in"""
    if request.method == 'GET' or workspace.gate.is_authenticated:
        return redirect(url_for('admin.index'))

    email = request.form.get('email', '').strip()
    password = request.form.get('password', '')

    if not email or not password:
        flash('Please enter both email and password', 'error')
        return render_template('admin/login.html', email=email), 400

    result = workspace.sign_in(email, password)
    if not result.ok:
        # The backend's own message, shown as-is
        flash(workspace.gate.error, 'error')
        return render_template('admin/login.html', email=email), 401

    flash('Signed in', 'success')
    return redirect(url_for('admin.index'))


@admin_bp.route('/logout', methods=['POST'])
@workspace_view
def logout(workspace):
    """Sign out and drop the cached content"""
    result = workspace.sign_out()
    if not result.ok:
        LoggingService.warning('admin', 'Backend sign-out failed; local session dropped',
                               {'error': result.error})
    flash('You have been signed out', 'info')
    return redirect(url_for('admin.index'))


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def _project_form(workspace, project):
    if request.method == 'POST':
        values, errors = project_values_from_form(request.form)
        if errors:
            return render_template('admin/project_form.html', project=project,
                                   form=request.form, errors=errors), 400

        result = workspace.content.save_project(project.id if project else None, values)
        if result.ok:
            flash(f"Project '{result.data.title}' {'updated' if project else 'created'}", 'success')
            return redirect(url_for('admin.index', tab='projects'))

        # Keep the form open with what was typed
        flash(f"Could not save project: {result.error}", 'error')
        return render_template('admin/project_form.html', project=project,
                               form=request.form, errors={}), 502

    return render_template('admin/project_form.html', project=project,
                           form=project_form_data(project), errors={})


@admin_bp.route('/projects/new', methods=['GET', 'POST'])
@workspace_view
@admin_required
def new_project(workspace):
    return _project_form(workspace, None)


@admin_bp.route('/projects/<project_id>/edit', methods=['GET', 'POST'])
@workspace_view
@admin_required
def edit_project(workspace, project_id):
    project = workspace.content.find_project(project_id)
    if project is None:
        abort(404)
    return _project_form(workspace, project)


@admin_bp.route('/projects/<project_id>/delete', methods=['GET', 'POST'])
@workspace_view
@admin_required
def delete_project(workspace, project_id):
    """Confirmation page on GET, deletion on confirmed POST"""
    project = workspace.content.find_project(project_id)
    if project is None:
        abort(404)

    if request.method == 'POST':
        if request.form.get('confirm') != 'yes':
            flash('Nothing was deleted', 'info')
        else:
            result = workspace.content.delete_project(project.id)
            if result.ok:
                flash(f"Project '{project.title}' deleted", 'success')
            else:
                flash(f"Could not delete project: {result.error}", 'error')
        return redirect(url_for('admin.index', tab='projects'))

    return render_template('admin/confirm_delete.html',
                           kind='project',
                           title=project.title,
                           action_url=url_for('admin.delete_project', project_id=project.id),
                           cancel_url=url_for('admin.index', tab='projects'))


# ---------------------------------------------------------------------------
# Blog posts
# ---------------------------------------------------------------------------

def _blog_post_form(workspace, post):
    if request.method == 'POST':
        values, errors = blog_post_values_from_form(request.form, creating=post is None)
        if errors:
            return render_template('admin/post_form.html', post=post,
                                   form=request.form, errors=errors), 400

        result = workspace.content.save_blog_post(post.id if post else None, values)
        if result.ok:
            flash(f"Post '{result.data.title}' {'updated' if post else 'created'}", 'success')
            return redirect(url_for('admin.index', tab='blogs'))

        flash(f"Could not save post: {result.error}", 'error')
        return render_template('admin/post_form.html', post=post,
                               form=request.form, errors={}), 502

    return render_template('admin/post_form.html', post=post,
                           form=blog_post_form_data(post), errors={})


@admin_bp.route('/posts/new', methods=['GET', 'POST'])
@workspace_view
@admin_required
def new_blog_post(workspace):
    return _blog_post_form(workspace, None)


@admin_bp.route('/posts/<post_id>/edit', methods=['GET', 'POST'])
@workspace_view
@admin_required
def edit_blog_post(workspace, post_id):
    post = workspace.content.find_blog_post(post_id)
    if post is None:
        abort(404)
    return _blog_post_form(workspace, post)


@admin_bp.route('/posts/<post_id>/delete', methods=['GET', 'POST'])
@workspace_view
@admin_required
def delete_blog_post(workspace, post_id):
    """Confirmation page on GET, deletion on confirmed POST"""
    post = workspace.content.find_blog_post(post_id)
    if post is None:
        abort(404)

    if request.method == 'POST':
        if request.form.get('confirm') != 'yes':
            flash('Nothing was deleted', 'info')
        else:
            result = workspace.content.delete_blog_post(post.id)
            if result.ok:
                flash(f"Post '{post.title}' deleted", 'success')
            else:
                flash(f"Could not delete post: {result.error}", 'error')
        return redirect(url_for('admin.index', tab='blogs'))

    return render_template('admin/confirm_delete.html',
                           kind='blog post',
                           title=post.title,
                           action_url=url_for('admin.delete_blog_post', post_id=post.id),
                           cancel_url=url_for('admin.index', tab='blogs'))


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

@admin_bp.route('/profile', methods=['GET', 'POST'])
@workspace_view
@admin_required
def edit_profile(workspace):
    profile = workspace.content.profile

    if request.method == 'POST':
        values, errors = profile_values_from_form(request.form)
        if errors:
            return render_template('admin/profile_form.html', profile=profile,
                                   form=request.form, errors=errors), 400

        result = workspace.content.save_profile(values)
        if result.ok:
            flash('Profile updated', 'success')
            return redirect(url_for('admin.index', tab='profile'))

        flash(f"Could not save profile: {result.error}", 'error')
        return render_template('admin/profile_form.html', profile=profile,
                               form=request.form, errors={}), 502

    return render_template('admin/profile_form.html', profile=profile,
                           form=profile_form_data(profile), errors={})
