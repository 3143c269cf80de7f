"""Test configuration and fixtures for Permapress tests."""

import os
import shutil
import sys
import tempfile
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from permapress_pkg.document import SourceDocument, build_document
from permapress_pkg.layouts import LayoutRegistry


TEST_LAYOUTS = {
    'default': """<html>
<head><title>{{ title }}</title></head>
<body>{{ content }}</body>
</html>""",
    'post': """---
layout: default
---
<article>
<h1>{{ title }}</h1>
{{ content }}
<ul class="tags">{% for tag in tag_links %}<li><a href="{{ tag.url }}">{{ tag.name }}</a></li>{% endfor %}</ul>
</article>""",
    'page': """---
layout: default
---
<div class="page">{{ content }}</div>""",
    'tag': """---
layout: default
---
<h1>{{ tag }}</h1>
<ul>{% for post in posts %}
<li><a href="{{ post.url }}">{{ post.title }}</a></li>{% endfor %}
</ul>""",
    'index': """---
layout: default
---
<ul>{% for post in posts %}
<li><a href="{{ post.url }}">{{ post.title }}</a></li>{% endfor %}
</ul>""",
}


SAMPLE_SOURCES = {
    '_posts/2021-03-14-retry-strategies.md': """---
layout: post
title: "Retry strategies"
tags: [Java, Resilience]
---

Exponential backoff with **jitter** keeps clients from retrying in lockstep.
""",
    '_posts/2021-06-02-java-nullability.md': """---
layout: post
title: "Nullability in Java"
tags: Java
---

Prefer `Optional` for return values that may be absent.
""",
    '_posts/2021-09-20-immutability.md': """---
layout: post
title: "Immutability"
tags:
  - Java
  - Design
---

Immutable objects are safe to share between threads.
""",
    '_posts/2022-01-01-logging.md': """---
layout: post
title: "Logging"
tags: [Java, Logging]
---

# Structured logging

Log events, not sentences.
""",
    '_posts/2022-04-11-lambda-cold-starts.md': """---
layout: post
title: "Lambda cold starts"
tags: [AWS, Lambda]
---

![Cold start timeline](/assets/cold-start.png)

Cold starts matter most for [synchronous invocations](https://aws.amazon.com/lambda/).
""",
    'about.md': """---
layout: page
title: About
permalink: /about/
---

Notes on software engineering.
""",
}


def make_document(filename, body='Body text.\n', **metadata):
    """Build a Document straight from front matter keyword arguments."""
    return build_document(filename, metadata, body)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def layout_registry():
    """A registry holding the small test layouts."""
    return LayoutRegistry(TEST_LAYOUTS)


@pytest.fixture
def sample_sources():
    """The sample blog as SourceDocuments."""
    return [SourceDocument(name, text) for name, text in SAMPLE_SOURCES.items()]


@pytest.fixture
def mock_content_dir(temp_dir):
    """Write the sample blog to a content directory."""
    content_dir = Path(temp_dir) / 'content'
    for name, text in SAMPLE_SOURCES.items():
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding='utf-8')
    return str(content_dir)


@pytest.fixture
def mock_layouts_dir(temp_dir):
    """Write the test layouts to a layouts directory."""
    layouts_dir = Path(temp_dir) / 'layouts'
    layouts_dir.mkdir()
    for name, text in TEST_LAYOUTS.items():
        (layouts_dir / f'{name}.html').write_text(text, encoding='utf-8')
    return str(layouts_dir)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Path of a not yet created output directory."""
    return str(Path(temp_dir) / 'output')
