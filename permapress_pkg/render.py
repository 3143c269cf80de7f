"""
Body rendering: Markdown to HTML, then wrapped in a layout chain.
"""

import logging
import posixpath
import re

import mistune
from jinja2 import DictLoader, Environment, TemplateError

from .errors import TemplateRenderError

logger = logging.getLogger('Permapress.render')

EXCERPT_WORDS = 30


def generate_excerpt(content, words=EXCERPT_WORDS):
    """Generate a plain-text excerpt from rendered content."""
    plain_text = re.sub(r'<[^>]+>', '', content)
    parts = plain_text.split()
    if len(parts) > words:
        return ' '.join(parts[:words]) + '...'
    return ' '.join(parts)


def relative_root(path):
    """Relative path from a public path back to the site root, e.g. '../../'."""
    directory = path if path.endswith('/') else posixpath.dirname(path) + '/'
    depth = len([segment for segment in directory.split('/') if segment])
    return '../' * depth


class BodyRenderer:
    """Render documents and listing pages against a LayoutRegistry."""

    def __init__(self, registry, site=None):
        self.registry = registry
        self.site = dict(site or {})
        self.env = Environment(loader=DictLoader(registry.loader_mapping()))
        self.markdown_parser = self.create_markdown_parser()
        self.env.filters['markdown'] = self.markdown_filter

    def create_markdown_parser(self):
        """Create a Mistune markdown parser with a custom renderer."""
        class CustomRenderer(mistune.HTMLRenderer):
            def __init__(self):
                super().__init__(escape=False)

            def block_code(self, code, info=None):
                escaped_code = mistune.escape(code)
                language = info.split()[0] if info and info.strip() else None
                if language:
                    return '<pre><code class="language-{}">{}</code></pre>\n'.format(
                        mistune.escape(language), escaped_code)
                return '<pre><code>{}</code></pre>\n'.format(escaped_code)

        return mistune.create_markdown(
            renderer=CustomRenderer(),
            plugins=['table', 'task_lists', 'strikethrough']
        )

    def markdown_filter(self, text):
        """Convert markdown text to HTML."""
        return self.markdown_parser(text or '')

    def render_document(self, document, route, tag_routes=None):
        """Render a document's body and wrap it in its layout chain."""
        tag_routes = tag_routes or {}
        html_content = self.markdown_filter(document.body)

        page = dict(document.metadata)
        page.update({
            'title': document.title,
            'slug': document.slug,
            'url': route.path,
            'date': document.publish_date,
            'tags': list(document.tags),
            'kind': document.kind,
            'source': document.source,
        })
        context = {
            'title': document.title or '',
            'tags': list(document.tags),
            'tag_links': [{'name': tag, 'url': tag_routes.get(tag)} for tag in document.tags],
            'date': document.publish_date,
            'page': page,
            'relative_path': relative_root(route.path),
        }
        return self.apply_layout(document.layout, html_content, context, document.source)

    def render_listing(self, layout, title, path, entries, owner, tag=None):
        """Render a listing page (home index or tag page) of document entries."""
        context = {
            'title': title,
            'tag': tag,
            'tags': [tag] if tag else [],
            'tag_links': [],
            'posts': entries,
            'date': None,
            'page': {'title': title, 'url': path, 'kind': 'listing', 'tag': tag},
            'relative_path': relative_root(path),
        }
        return self.apply_layout(layout, '', context, owner)

    def apply_layout(self, layout, content, context, source):
        """Render content through each layout of the chain, innermost first."""
        for name in self.registry.chain(layout, source):
            try:
                template = self.env.get_template(name)
                content = template.render(
                    content=content,
                    body=content,
                    site=self.site,
                    layout=name,
                    **context
                )
            except TemplateError as e:
                raise TemplateRenderError(f"layout '{name}' failed to render: {e}", source) from e
        return content


def listing_entry(document, route, renderer):
    """Summary of a document for listing templates."""
    excerpt = document.metadata.get('excerpt') or document.metadata.get('description')
    if not excerpt:
        excerpt = generate_excerpt(renderer.markdown_filter(document.body))
    return {
        'title': document.display_title,
        'url': route.path,
        'date': document.publish_date,
        'tags': list(document.tags),
        'excerpt': str(excerpt),
        'source': document.source,
    }
