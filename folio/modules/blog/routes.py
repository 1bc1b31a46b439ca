"""
Blog Reader Routes
==================
"""

import markdown
from flask import current_app, render_template, url_for
from markdown.extensions import Extension
from markupsafe import Markup

from folio.core.data import gather
from folio.modules.site.routes import default_profile
from . import blog_bp


class EscapeHtmlExtension(Extension):
    """Treat raw HTML in a post as text, so it is escaped instead of passed through"""

    def extendMarkdown(self, md):
        md.preprocessors.deregister('html_block')
        md.inlinePatterns.deregister('html')


MARKDOWN_EXTENSIONS = ['fenced_code', 'tables', 'sane_lists', 'smarty']


def render_markdown(text):
    """Markdown post body to HTML"""
    return markdown.markdown(text or '',
                             extensions=[*MARKDOWN_EXTENSIONS, EscapeHtmlExtension()],
                             output_format='html')


@blog_bp.app_template_filter('markdown')
def markdown_filter(text):
    return Markup(render_markdown(text))


@blog_bp.route('/<slug>')
def blog_post(slug):
    """Individual blog post page - only published posts"""
    data = current_app.extensions['folio'].data
    post, profile = gather(lambda: data.get_blog_post_by_slug(slug), data.get_profile)

    if not post.ok:
        return render_template('folio/error.html',
                               heading='Post Not Found',
                               message="The blog post you're looking for doesn't exist or has been removed.",
                               back_url=url_for('site.index') + '#blog',
                               back_label='Back to Blog'), 404

    return render_template('blog/post.html',
                           post=post.data,
                           profile=profile.data or default_profile())
