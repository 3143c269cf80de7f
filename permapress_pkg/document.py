"""
Document model for posts and pages.

A Document is built once per source file from its parsed front matter and
is never modified afterwards.
"""

import posixpath
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple

from .errors import InvalidDocumentError, InvalidPermalinkError

DATED_FILENAME = re.compile(r'^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<rest>.+)$')

POST = 'post'
PAGE = 'page'

UNPUBLISHED_VALUES = ('false', 'no', 'off', '0')


@dataclass(frozen=True)
class SourceDocument:
    """A raw source file as handed over by discovery."""
    filename: str
    text: str


@dataclass(frozen=True)
class Document:
    source: str
    layout: str
    slug: str
    body: str
    kind: str = PAGE
    title: Optional[str] = None
    permalink: Optional[str] = None
    tags: Tuple[str, ...] = ()
    publish_date: Optional[date] = None
    published: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def is_post(self):
        return self.kind == POST

    @property
    def display_title(self):
        """Title for listings, falling back to the slug for untitled pages."""
        return self.title or self.slug


def slugify(text):
    """Turn text into a lowercase, hyphen separated, URL-safe identifier."""
    text = str(text).strip().lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_-]+', '-', text)
    return text.strip('-')


def normalize_tags(value):
    """
    Normalize a front matter tags value into a tuple of unique tags.

    Accepts a list or a comma separated string. Items are trimmed, empty
    items dropped, and duplicates removed keeping the first occurrence.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        items = value.split(',')
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        items = [str(value)]

    tags = []
    for item in items:
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def split_filename(filename):
    """
    Derive (publish_date, slug) from a source filename.

    Files named YYYY-MM-DD-slug.md carry their publish date; any other file
    has no date and uses its stem as the slug.
    """
    stem = posixpath.splitext(posixpath.basename(filename.replace('\\', '/')))[0]
    match = DATED_FILENAME.match(stem)
    if not match:
        return None, slugify(stem)

    try:
        publish_date = date(int(match.group('year')), int(match.group('month')), int(match.group('day')))
    except ValueError as e:
        raise InvalidDocumentError(f"invalid date prefix in filename: {e}", filename) from e
    return publish_date, slugify(match.group('rest'))


def is_published(value):
    """Read the published flag; false, "false", "no", "off" and 0 mark a draft."""
    if isinstance(value, str):
        return value.strip().lower() not in UNPUBLISHED_VALUES
    return value is not False and value != 0


def _text_field(metadata, key):
    value = metadata.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def build_document(source, metadata, body):
    """Build a Document from a filename and its parsed (metadata, body) pair."""
    publish_date, slug = split_filename(source)

    layout = _text_field(metadata, 'layout')
    if not layout:
        raise InvalidDocumentError("missing required front matter key 'layout'", source)

    kind = POST if publish_date is not None or layout == POST else PAGE
    title = _text_field(metadata, 'title')
    if kind == POST and not title:
        raise InvalidDocumentError("posts must declare a 'title'", source)

    permalink = metadata.get('permalink')
    if permalink is not None:
        if not isinstance(permalink, str):
            raise InvalidPermalinkError(f"permalink must be a string, got {permalink!r}", source)
        permalink = permalink.strip() or None

    if metadata.get('slug') is not None:
        slug = slugify(metadata['slug'])
    if not slug:
        raise InvalidDocumentError("cannot derive a slug from the filename", source)

    tags = normalize_tags(metadata.get('tags')) + normalize_tags(metadata.get('tag'))
    tags = tuple(dict.fromkeys(tags))

    return Document(
        source=source,
        layout=layout,
        slug=slug,
        body=body,
        kind=kind,
        title=title,
        permalink=permalink,
        tags=tags,
        publish_date=publish_date,
        published=is_published(metadata.get('published', True)),
        metadata=dict(metadata),
    )
