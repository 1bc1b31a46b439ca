"""
Admin Content State
===================

The admin's working copy of projects, blog posts and the profile.
Mutations go through the data access layer; on success the returned row
becomes the local truth for that id, on failure the local lists are left
exactly as they were. Nothing is re-fetched after a mutation.
"""

from folio.core.data import Result, gather
from folio.core.logging_service import LoggingService


def _same_id(a, b):
    return str(a) == str(b)


class ContentManager:

    def __init__(self, data):
        self.data = data
        self.projects = []
        self.blog_posts = []
        self.profile = None
        self.load_errors = []
        self.loaded = False

    def load(self):
        """Fetch every project, every post and the profile concurrently"""
        projects, posts, profile = gather(
            self.data.get_all_projects,
            self.data.get_all_blog_posts,
            self.data.get_profile,
        )
        self.projects = list(projects.data or [])
        self.blog_posts = list(posts.data or [])
        self.profile = profile.data
        self.load_errors = [r.error for r in (projects, posts, profile) if not r.ok]
        self.loaded = True

    def clear(self):
        self.projects = []
        self.blog_posts = []
        self.profile = None
        self.load_errors = []
        self.loaded = False

    # ===== Lookups =====

    def find_project(self, project_id):
        return next((p for p in self.projects if _same_id(p.id, project_id)), None)

    def find_blog_post(self, post_id):
        return next((b for b in self.blog_posts if _same_id(b.id, post_id)), None)

    # ===== Projects =====

    def save_project(self, project_id, values):
        """Create when project_id is None, otherwise update"""
        if project_id is None:
            result = self.data.create_project(values)
            if result.ok:
                self.projects.append(result.data)
                LoggingService.log_user_action('admin', 'create project', details={'id': result.data.id})
        else:
            result = self.data.update_project(project_id, values)
            if result.ok:
                self.projects = [result.data if _same_id(p.id, project_id) else p
                                 for p in self.projects]
                LoggingService.log_user_action('admin', 'update project', details={'id': project_id})
        return result

    def delete_project(self, project_id):
        result = self.data.delete_project(project_id)
        if result.ok:
            self.projects = [p for p in self.projects if not _same_id(p.id, project_id)]
            LoggingService.log_user_action('admin', 'delete project', details={'id': project_id})
        return result

    # ===== Blog posts =====

    def save_blog_post(self, post_id, values):
        """Create when post_id is None, otherwise update"""
        if post_id is None:
            result = self.data.create_blog_post(values)
            if result.ok:
                self.blog_posts.append(result.data)
                LoggingService.log_user_action('admin', 'create blog post', details={'id': result.data.id})
        else:
            result = self.data.update_blog_post(post_id, values)
            if result.ok:
                self.blog_posts = [result.data if _same_id(b.id, post_id) else b
                                   for b in self.blog_posts]
                LoggingService.log_user_action('admin', 'update blog post', details={'id': post_id})
        return result

    def delete_blog_post(self, post_id):
        result = self.data.delete_blog_post(post_id)
        if result.ok:
            self.blog_posts = [b for b in self.blog_posts if not _same_id(b.id, post_id)]
            LoggingService.log_user_action('admin', 'delete blog post', details={'id': post_id})
        return result

    # ===== Profile =====

    def save_profile(self, values):
        if self.profile is None:
            return Result(None, 'No profile loaded to update')
        result = self.data.update_profile(self.profile.id, values)
        if result.ok:
            self.profile = result.data
            LoggingService.log_user_action('admin', 'update profile', details={'id': self.profile.id})
        return result
