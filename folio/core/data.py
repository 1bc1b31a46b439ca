"""
Data Access Layer
=================

The only code that talks to the backend client. Every operation returns a
Result(data, error); backend and row-shape errors are logged and turned into
an error message here, so views never see an exception from the backend.
"""

from collections import namedtuple
from concurrent.futures import ThreadPoolExecutor

from .backend import BackendError
from .config import Config
from .logging_service import LoggingService
from .models import BlogPost, Profile, Project, RowShapeError

# Assigned by the backend on insert; never sent from forms
SERVER_FIELDS = ('id', 'created_at', 'updated_at')


class Result(namedtuple('Result', ['data', 'error'])):
    """Outcome of one data access call"""
    __slots__ = ()

    @property
    def ok(self):
        return self.error is None


def gather(*calls):
    """Run zero-argument callables concurrently, returning their results in order"""
    if not calls:
        return []
    with ThreadPoolExecutor(max_workers=len(calls)) as executor:
        futures = [executor.submit(call) for call in calls]
        return [future.result() for future in futures]


def _writable(values):
    return {key: value for key, value in dict(values).items() if key not in SERVER_FIELDS}


class DataAccess:
    """Typed operations over one BackendClient"""

    def __init__(self, client):
        self.client = client
        self.profile_table = Config.PROFILE_TABLE
        self.projects_table = Config.PROJECTS_TABLE
        self.posts_table = Config.BLOG_POSTS_TABLE

    def _call(self, description, func, default=None):
        try:
            return Result(func(), None)
        except (BackendError, RowShapeError) as e:
            LoggingService.error('backend', f"Error {description}", {
                'error': str(e),
                'code': getattr(e, 'code', None),
                'status': getattr(e, 'status', None),
            })
            return Result(default, str(e))

    # ===== Public reads =====

    def get_profile(self):
        """The single profile row"""
        def run():
            row = self.client.table(self.profile_table).select('*').single().execute()
            return Profile.from_row(row)
        return self._call('fetching profile', run)

    def get_projects(self):
        """Visible projects by display_order"""
        def run():
            rows = (self.client.table(self.projects_table).select('*')
                    .eq('is_visible', True)
                    .order('display_order', ascending=True)
                    .execute())
            return [Project.from_row(row) for row in rows]
        return self._call('fetching projects', run, default=[])

    def get_blog_posts(self):
        """Published posts, newest first"""
        def run():
            rows = (self.client.table(self.posts_table).select('*')
                    .eq('is_published', True)
                    .order('published_at', ascending=False)
                    .execute())
            return [BlogPost.from_row(row) for row in rows]
        return self._call('fetching blog posts', run, default=[])

    def get_blog_post_by_slug(self, slug):
        """One published post; unpublished or missing is an error"""
        def run():
            row = (self.client.table(self.posts_table).select('*')
                   .eq('slug', slug)
                   .eq('is_published', True)
                   .single()
                   .execute())
            return BlogPost.from_row(row)
        return self._call(f"fetching blog post '{slug}'", run)

    # ===== Admin reads =====

    def get_all_projects(self):
        """Every project, hidden ones included"""
        def run():
            rows = (self.client.table(self.projects_table).select('*')
                    .order('display_order', ascending=True)
                    .execute())
            return [Project.from_row(row) for row in rows]
        return self._call('fetching all projects', run, default=[])

    def get_all_blog_posts(self):
        """Every post, drafts included, newest created first"""
        def run():
            rows = (self.client.table(self.posts_table).select('*')
                    .order('created_at', ascending=False)
                    .execute())
            return [BlogPost.from_row(row) for row in rows]
        return self._call('fetching all blog posts', run, default=[])

    # ===== Mutations =====

    def _insert(self, table, model, values):
        row = self.client.table(table).insert(_writable(values)).select().single().execute()
        return model.from_row(row)

    def _update(self, table, model, row_id, values):
        row = (self.client.table(table).update(_writable(values))
               .eq('id', row_id).select().single().execute())
        return model.from_row(row)

    def _delete(self, table, row_id):
        self.client.table(table).delete().eq('id', row_id).execute()
        return None

    def create_project(self, values):
        return self._call('creating project',
                          lambda: self._insert(self.projects_table, Project, values))

    def update_project(self, project_id, values):
        return self._call(f"updating project {project_id}",
                          lambda: self._update(self.projects_table, Project, project_id, values))

    def delete_project(self, project_id):
        return self._call(f"deleting project {project_id}",
                          lambda: self._delete(self.projects_table, project_id))

    def create_blog_post(self, values):
        return self._call('creating blog post',
                          lambda: self._insert(self.posts_table, BlogPost, values))

    def update_blog_post(self, post_id, values):
        return self._call(f"updating blog post {post_id}",
                          lambda: self._update(self.posts_table, BlogPost, post_id, values))

    def delete_blog_post(self, post_id):
        return self._call(f"deleting blog post {post_id}",
                          lambda: self._delete(self.posts_table, post_id))

    def update_profile(self, profile_id, values):
        return self._call(f"updating profile {profile_id}",
                          lambda: self._update(self.profile_table, Profile, profile_id, values))

    # ===== Auth =====

    def sign_in(self, email, password):
        result = self._call('signing in',
                            lambda: self.client.auth.sign_in_with_password(email, password))
        if not result.ok:
            LoggingService.log_security_event('Failed admin sign-in', {'email': email})
        return result

    def sign_out(self):
        return self._call('signing out', self.client.auth.sign_out)

    def get_session(self):
        return self._call('reading session', self.client.auth.get_session)

    def restore_session(self, refresh_token):
        return self._call('restoring session',
                          lambda: self.client.auth.restore_session(refresh_token))

    def adopt_refresh_token(self, refresh_token):
        self.client.auth.adopt_refresh_token(refresh_token)
        return Result(None, None)

    def on_auth_state_change(self, callback):
        """Subscribe to SIGNED_IN / SIGNED_OUT / TOKEN_REFRESHED; data is the subscription"""
        return Result(self.client.auth.on_auth_state_change(callback), None)
