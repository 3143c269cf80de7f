"""
Permalink resolution.

Every document is mapped to exactly one public path. Explicit permalinks
win; otherwise dated posts live under /YYYY/MM/DD/slug/ and everything else
under /slug/. Two owners resolving to one path abort the build.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from .document import Document, slugify
from .errors import InvalidPermalinkError, RouteCollisionError

logger = logging.getLogger('Permapress.routes')

PLACEHOLDER = re.compile(r':([A-Za-z_]+)')
UNRESOLVED_PLACEHOLDER = re.compile(r':[A-Za-z_]+|\{[^}]*\}')


@dataclass(frozen=True)
class Route:
    path: str
    owner: str
    document: Optional[Document] = None

    @property
    def output_path(self):
        return output_path_for(self.path)


def normalize_path(path):
    """Collapse repeated slashes and give extension-less paths a trailing slash."""
    path = re.sub(r'/{2,}', '/', path)
    last_segment = path.rsplit('/', 1)[-1]
    if last_segment and '.' not in last_segment:
        path += '/'
    return path


def output_path_for(path):
    """Map a public path to a file path relative to the output directory."""
    relative = path.lstrip('/')
    if path.endswith('/'):
        relative += 'index.html'
    return relative


def tag_route(tag, base='tags'):
    """Public path of the listing page for a tag."""
    tag_slug = slugify(tag) or quote(tag.strip().lower(), safe='')
    return normalize_path(f"/{base.strip('/')}/{tag_slug}/")


def assign_tag_routes(tags, base='tags'):
    """
    Give every tag its own listing path.

    Tags whose slugs coincide (``C`` and ``C++``, ``Java`` and ``java``)
    are told apart by a numeric suffix, handed out in the given tag order.
    """
    assigned = {}
    taken = set()
    for tag in tags:
        path = tag_route(tag, base)
        counter = 2
        while path in taken:
            path = f"{tag_route(tag, base).rstrip('/')}-{counter}/"
            counter += 1
        if counter > 2:
            logger.debug(f"Tag {tag!r} shares its slug with another tag, using {path}")
        taken.add(path)
        assigned[tag] = path
    return assigned


def expand_permalink(document):
    """Substitute :year, :month, :day, :slug and :title in an explicit permalink."""
    values = {
        'slug': document.slug,
        'title': slugify(document.title) if document.title else document.slug,
    }
    if document.publish_date:
        values['year'] = f"{document.publish_date.year:04d}"
        values['month'] = f"{document.publish_date.month:02d}"
        values['day'] = f"{document.publish_date.day:02d}"

    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), document.permalink)


def permalink_for(document):
    """Compute the public path of a single document."""
    if document.permalink:
        path = expand_permalink(document)
        if not path.startswith('/'):
            raise InvalidPermalinkError(f"permalink {document.permalink!r} must start with '/'", document.source)
        if UNRESOLVED_PLACEHOLDER.search(path):
            raise InvalidPermalinkError(f"permalink {document.permalink!r} has an unresolved placeholder", document.source)
        if '..' in path.split('/'):
            raise InvalidPermalinkError(f"permalink {document.permalink!r} escapes the site root", document.source)
        return normalize_path(path)

    if document.is_post and document.publish_date:
        d = document.publish_date
        return f"/{d.year:04d}/{d.month:02d}/{d.day:02d}/{document.slug}/"
    return f"/{document.slug}/"


def resolve_routes(documents, reserved=None):
    """
    Resolve every document to a unique route.

    ``reserved`` maps paths owned by generated pages to a label for them.
    Returns (routes, failures): routes in document order, and the
    InvalidPermalinkError raised by documents that could not be routed.
    Raises RouteCollisionError on the first path claimed twice.
    """
    routes = []
    failures = []
    for document in documents:
        try:
            routes.append(Route(permalink_for(document), document.source, document))
        except InvalidPermalinkError as e:
            logger.error(f"Cannot route {document.source}: {e.message}")
            failures.append(e)

    owners = dict(reserved or {})
    for route in routes:
        if route.path in owners:
            raise RouteCollisionError(route.path, owners[route.path], route.owner)
        owners[route.path] = route.owner
        logger.debug(f"Routed {route.owner} -> {route.path}")

    return routes, failures
