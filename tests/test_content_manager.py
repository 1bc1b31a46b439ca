"""
Admin working copy: optimistic local lists that only change when the
backend confirms a mutation.
"""

import pytest

from folio.core.data import DataAccess
from folio.modules.admin.content import ContentManager

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def project_values(**overrides):
    values = {"title": "New project", "description": "d", "tags": ["Flask"], "url": None,
              "github_url": None, "image_url": None, "display_order": 0, "is_visible": True}
    values.update(overrides)
    return values


def post_values(**overrides):
    values = {"title": "New post", "slug": "new-post", "description": "d", "content": "body",
              "read_time": 5, "is_published": False, "published_at": None}
    values.update(overrides)
    return values


@pytest.fixture
def content(backend, backend_config):
    backend.set_profile()
    backend.add_project(title="Existing")
    backend.add_post(title="Existing post", slug="existing")
    data = DataAccess(backend_config.create_client())
    assert data.sign_in(ADMIN_EMAIL, ADMIN_PASSWORD).ok
    manager = ContentManager(data)
    manager.load()
    return manager


def test_load_fetches_everything(content):
    assert content.loaded
    assert [p.title for p in content.projects] == ["Existing"]
    assert [b.slug for b in content.blog_posts] == ["existing"]
    assert content.profile.name == "Ada Lovelace"
    assert content.load_errors == []


def test_load_keeps_partial_results_and_errors(backend, content):
    backend.fail("GET", "/rest/v1/blog_posts", message="timeout")
    content.load()
    assert len(content.projects) == 1
    assert content.blog_posts == []
    assert content.load_errors == ["timeout"]


def test_created_project_appears_once(backend, content):
    result = content.save_project(None, project_values())

    assert result.ok
    titles = [p.title for p in content.projects]
    assert titles.count("New project") == 1
    assert content.find_project(result.data.id) is result.data


def test_updated_project_replaces_row_in_place(content):
    existing = content.projects[0]
    result = content.save_project(existing.id, project_values(title="Renamed"))

    assert result.ok
    assert len(content.projects) == 1
    assert content.projects[0].title == "Renamed"


def test_failed_create_leaves_list_unchanged(backend, content):
    backend.fail("POST", "/rest/v1/projects", message="insert failed")
    before = list(content.projects)

    result = content.save_project(None, project_values())

    assert result.error == "insert failed"
    assert content.projects == before


def test_failed_update_leaves_list_unchanged(backend, content):
    backend.fail("PATCH", "/rest/v1/blog_posts", message="update failed")
    before = list(content.blog_posts)

    result = content.save_blog_post(before[0].id, post_values(title="Changed"))

    assert not result.ok
    assert content.blog_posts == before


def test_failed_delete_keeps_the_row(backend, content):
    backend.fail("DELETE", "/rest/v1/projects", message="delete failed")
    project_id = content.projects[0].id

    result = content.delete_project(project_id)

    assert not result.ok
    assert content.find_project(project_id) is not None
    assert backend.row("projects", project_id) is not None


def test_delete_removes_row(backend, content):
    post_id = content.blog_posts[0].id
    assert content.delete_blog_post(post_id).ok
    assert content.blog_posts == []


def test_mutations_do_not_refetch(backend, content):
    fetches = len(backend.calls_to("GET", "/rest/v1/projects"))
    content.save_project(None, project_values())
    content.delete_project(content.projects[0].id)
    assert len(backend.calls_to("GET", "/rest/v1/projects")) == fetches


def test_created_post_is_appended(content):
    result = content.save_blog_post(None, post_values())
    assert result.ok
    assert [b.slug for b in content.blog_posts] == ["existing", "new-post"]


def test_lookup_compares_ids_as_text(content):
    project = content.projects[0]
    assert content.find_project(str(project.id)) is project
    assert content.find_blog_post("missing") is None


def test_save_profile(content):
    result = content.save_profile({"tagline": "Updated"})
    assert result.ok
    assert content.profile.tagline == "Updated"


def test_save_profile_without_loaded_profile(content):
    content.profile = None
    result = content.save_profile({"tagline": "Updated"})
    assert result.error == "No profile loaded to update"


def test_clear(content):
    content.clear()
    assert content.projects == []
    assert content.blog_posts == []
    assert content.profile is None
    assert not content.loaded
