"""Split a YAML front matter block from the head of a Markdown document."""

import re
from datetime import date, datetime

import yaml

from .errors import MalformedFrontMatterError

FRONT_MATTER_OPEN = re.compile(r'\A---[ \t]*\r?\n')
FRONT_MATTER_CLOSE = re.compile(r'^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)', re.MULTILINE)

SCALAR_TYPES = (str, int, float, bool, date, datetime, type(None))


def parse_front_matter(text, source=None):
    """
    Parse the front matter of a document.

    Returns a (metadata, body) tuple. Documents without a block yield an
    empty mapping and the text unchanged.
    """
    clean_text = text.lstrip('\ufeff')
    opening = FRONT_MATTER_OPEN.match(clean_text)
    if not opening:
        return {}, text

    closing = FRONT_MATTER_CLOSE.search(clean_text, opening.end())
    if not closing:
        raise MalformedFrontMatterError("front matter opened with '---' but never closed", source)

    block = clean_text[opening.end():closing.start()]
    body = clean_text[closing.end():]

    try:
        metadata = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise MalformedFrontMatterError(f"invalid YAML in front matter: {e}", source) from e

    if metadata is None:
        return {}, body
    if not isinstance(metadata, dict):
        raise MalformedFrontMatterError("front matter must be a list of 'key: value' lines", source)

    for key, value in metadata.items():
        if not isinstance(key, str):
            raise MalformedFrontMatterError(f"front matter key {key!r} is not a string", source)
        if isinstance(value, list):
            if not all(isinstance(item, SCALAR_TYPES) for item in value):
                raise MalformedFrontMatterError(f"list value for '{key}' must hold only scalars", source)
        elif not isinstance(value, SCALAR_TYPES):
            raise MalformedFrontMatterError(f"value for '{key}' must be a scalar or a list", source)

    return metadata, body
