"""Locate and read Markdown sources under a content directory."""

import logging
import os

from .document import SourceDocument

logger = logging.getLogger('Permapress.sources')

MARKDOWN_EXTENSIONS = ('.md', '.markdown')
# Underscore directories are private, except the conventional content ones
CONTENT_DIRECTORIES = ('_posts', '_pages')


def is_hidden(name):
    return name.startswith('.') or (name.startswith('_') and name not in CONTENT_DIRECTORIES)


def get_markdown_files(directory, exclude=()):
    """Get all markdown files below a directory, as sorted relative paths."""
    markdown_files = []
    if not os.path.isdir(directory):
        return markdown_files
    excluded = {os.path.abspath(path) for path in exclude if path}

    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(
            d for d in dirnames
            if not is_hidden(d) and os.path.abspath(os.path.join(dirpath, d)) not in excluded
        )
        for filename in filenames:
            if is_hidden(filename) or not filename.lower().endswith(MARKDOWN_EXTENSIONS):
                continue
            relative = os.path.relpath(os.path.join(dirpath, filename), directory)
            markdown_files.append(relative.replace(os.sep, '/'))
    return sorted(markdown_files)


def discover_sources(content_dir, exclude=()):
    """
    Read every Markdown file under content_dir.

    Returns a list of SourceDocument whose filenames are relative to
    content_dir. Directories in ``exclude`` (such as the output directory)
    are not descended into.
    """
    if not os.path.isdir(content_dir):
        raise FileNotFoundError(f"Content directory {content_dir} not found")

    sources = []
    for relative in get_markdown_files(content_dir, exclude):
        path = os.path.join(content_dir, relative)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except (IOError, OSError, UnicodeDecodeError) as e:
            raise IOError(f"Failed to read markdown file {path}: {e}")
        sources.append(SourceDocument(relative, text))

    logger.debug(f"Discovered {len(sources)} markdown files in {content_dir}")
    return sources
