"""Persist rendered pages to the output directory."""

import logging
import os

logger = logging.getLogger('Permapress.writer')


def target_path(output_dir, page):
    """Absolute file path for a page, refusing paths outside output_dir."""
    root = os.path.abspath(output_dir)
    path = os.path.abspath(os.path.join(root, *page.output_path.split('/')))
    if os.path.commonpath([root, path]) != root:
        raise ValueError(f"Path traversal attempt detected: {page.path}")
    return path


def write_site(pages, output_dir):
    """Write every page under output_dir and return the written file paths."""
    os.makedirs(output_dir, exist_ok=True)
    written = []
    for page in pages:
        path = target_path(output_dir, page)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        try:
            with open(path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(page.content)
        except (IOError, OSError) as e:
            raise IOError(f"Failed to write {path}: {e}")
        logger.debug(f"Generated {path}")
        written.append(path)
    return written
