"""Tests for the body renderer."""

import pytest

from conftest import make_document
from permapress_pkg.errors import TemplateRenderError, UnknownLayoutError
from permapress_pkg.layouts import LayoutRegistry
from permapress_pkg.render import BodyRenderer, generate_excerpt, listing_entry, relative_root
from permapress_pkg.routes import Route


def route_for(document, path):
    return Route(path, document.source, document)


class TestMarkdown:
    """Test cases for the Markdown transformation."""

    @pytest.fixture
    def renderer(self, layout_registry):
        return BodyRenderer(layout_registry)

    def test_headings_and_emphasis(self, renderer):
        html = renderer.markdown_filter('# Title\n\nSome *emphasis* and **strong** text.\n')
        assert '<h1>Title</h1>' in html
        assert '<em>emphasis</em>' in html
        assert '<strong>strong</strong>' in html

    def test_lists(self, renderer):
        html = renderer.markdown_filter('- one\n- two\n\n1. first\n2. second\n')
        assert '<ul>' in html and '<li>one</li>' in html
        assert '<ol>' in html and '<li>second</li>' in html

    def test_fenced_code_is_escaped(self, renderer):
        html = renderer.markdown_filter('```java\nList<String> names = new ArrayList<>();\n```\n')
        assert '<pre><code class="language-java">' in html
        assert 'List&lt;String&gt;' in html

    def test_links_and_images(self, renderer):
        html = renderer.markdown_filter('[AWS](https://aws.amazon.com/)\n\n![Timeline](/assets/t.png)\n')
        assert '<a href="https://aws.amazon.com/">AWS</a>' in html
        assert 'src="/assets/t.png"' in html
        assert 'alt="Timeline"' in html

    def test_inline_html_passes_through(self, renderer):
        html = renderer.markdown_filter('A <span class="note">note</span>.\n')
        assert '<span class="note">note</span>' in html

    def test_tables(self, renderer):
        html = renderer.markdown_filter('| a | b |\n|---|---|\n| 1 | 2 |\n')
        assert '<table>' in html
        assert '<td>1</td>' in html


class TestRenderDocument:
    """Test cases for wrapping documents in layouts."""

    def test_layout_chain_is_applied(self, layout_registry):
        document = make_document('2022-01-01-x.md', body='Hello **world**\n', layout='post', title='X',
                                 tags=['Java', 'Logging'])
        renderer = BodyRenderer(layout_registry)

        html = renderer.render_document(document, route_for(document, '/2022/01/01/x/'),
                                        {'Java': '/tags/java/', 'Logging': '/tags/logging/'})

        assert html.startswith('<html>')
        assert '<title>X</title>' in html
        assert '<article>' in html
        assert '<strong>world</strong>' in html
        assert '<a href="/tags/java/">Java</a>' in html

    def test_no_front_matter_markers_in_output(self, layout_registry):
        document = make_document('about.md', body='About me.\n', layout='page', title='About')
        html = BodyRenderer(layout_registry).render_document(document, route_for(document, '/about/'))

        assert not html.startswith('---')
        assert 'layout:' not in html

    def test_context_exposes_page_and_site(self):
        registry = LayoutRegistry({
            'page': '{{ site.title }}|{{ page.url }}|{{ page.slug }}|{{ page.subtitle }}|{{ relative_path }}',
        })
        document = make_document('about.md', layout='page', subtitle='Hi')
        html = BodyRenderer(registry, {'title': 'Blog'}).render_document(document, route_for(document, '/about/'))

        assert html == 'Blog|/about/|about|Hi|../'

    def test_markdown_filter_in_templates(self):
        registry = LayoutRegistry({'page': '{{ page.summary|markdown }}{{ content }}'})
        document = make_document('about.md', body='', layout='page', summary='*short*')
        html = BodyRenderer(registry).render_document(document, route_for(document, '/about/'))

        assert '<em>short</em>' in html

    def test_unknown_layout(self, layout_registry):
        document = make_document('about.md', layout='gallery')
        with pytest.raises(UnknownLayoutError) as excinfo:
            BodyRenderer(layout_registry).render_document(document, route_for(document, '/about/'))
        assert excinfo.value.source == 'about.md'

    def test_template_syntax_error(self):
        registry = LayoutRegistry({'page': '{% for x in %}'})
        document = make_document('about.md', layout='page')
        with pytest.raises(TemplateRenderError, match="layout 'page'"):
            BodyRenderer(registry).render_document(document, route_for(document, '/about/'))

    def test_render_listing(self, layout_registry):
        document = make_document('2022-01-01-x.md', layout='post', title='X', tags=['Java'])
        renderer = BodyRenderer(layout_registry)
        entry = listing_entry(document, route_for(document, '/2022/01/01/x/'), renderer)

        html = renderer.render_listing('tag', 'Java', '/tags/java/', [entry], "tag page 'Java'", tag='Java')

        assert '<h1>Java</h1>' in html
        assert '<a href="/2022/01/01/x/">X</a>' in html


class TestHelpers:
    def test_relative_root(self):
        assert relative_root('/') == ''
        assert relative_root('/about/') == '../'
        assert relative_root('/2022/01/01/x/') == '../../../../'
        assert relative_root('/feed.xml') == ''

    def test_generate_excerpt(self):
        assert generate_excerpt('<p>Short <em>text</em></p>') == 'Short text'
        long_text = ' '.join(['word'] * 40)
        assert generate_excerpt(long_text) == ' '.join(['word'] * 30) + '...'

    def test_listing_entry_prefers_front_matter_excerpt(self, layout_registry):
        document = make_document('2022-01-01-x.md', body='Body text\n', layout='post', title='X', excerpt='Teaser')
        entry = listing_entry(document, route_for(document, '/x/'), BodyRenderer(layout_registry))

        assert entry['excerpt'] == 'Teaser'
        assert entry['url'] == '/x/'
