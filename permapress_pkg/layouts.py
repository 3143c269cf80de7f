"""
Layout registry.

Maps layout names to Jinja2 template sources. A layout may declare a parent
in its own front matter (``layout: default``); parent chains are resolved
once when the registry is built, so a missing parent or a cycle is known
before any document is rendered.
"""

import logging
import os
from importlib import resources

from .errors import LayoutCycleError, MalformedFrontMatterError, UnknownLayoutError
from .frontmatter import parse_front_matter

logger = logging.getLogger('Permapress.layouts')

TEMPLATE_EXTENSIONS = ('.html', '.htm', '.xml')
BUNDLED_LAYOUTS = ('default', 'post', 'page', 'tag', 'index')


def bundled_layout_sources():
    """Read the layouts shipped inside the package."""
    sources = {}
    templates = resources.files('permapress_pkg').joinpath('templates')
    for name in BUNDLED_LAYOUTS:
        sources[name] = templates.joinpath(f'{name}.html').read_text(encoding='utf-8')
    return sources


class LayoutRegistry:
    """Read-only lookup of layout name -> template, with resolved parent chains."""

    def __init__(self, sources):
        self.sources = dict(sources)
        self._templates = {}
        self._parents = {}
        self._chains = {}
        self._broken = {}

        for name in sorted(self.sources):
            try:
                metadata, body = parse_front_matter(self.sources[name], source=f"layout '{name}'")
            except MalformedFrontMatterError as e:
                self._broken[name] = UnknownLayoutError(f"layout '{name}' is unusable: {e.message}")
                continue
            self._templates[name] = body
            parent = metadata.get('layout')
            if parent is not None and str(parent).strip():
                self._parents[name] = str(parent).strip()

        for name in self._templates:
            try:
                self._chains[name] = self._resolve_chain(name)
            except UnknownLayoutError as e:
                logger.warning(str(e))
                self._broken[name] = e

    @classmethod
    def from_directory(cls, directory, include_bundled=True):
        """
        Load every template file in a directory; the file stem is the layout name.

        Bundled layouts fill in any of the standard names the directory lacks.
        """
        sources = bundled_layout_sources() if include_bundled else {}
        if directory and os.path.isdir(directory):
            for filename in sorted(os.listdir(directory)):
                name, ext = os.path.splitext(filename)
                if ext.lower() not in TEMPLATE_EXTENSIONS:
                    continue
                path = os.path.join(directory, filename)
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        sources[name] = f.read()
                except (IOError, OSError) as e:
                    raise IOError(f"Error reading layout file {path}: {e}")
                logger.debug(f"Loaded layout '{name}' from {path}")
        elif directory:
            logger.warning(f"Layouts directory {directory} not found, using bundled layouts only")
        return cls(sources)

    def _resolve_chain(self, name):
        chain = []
        current = name
        while current is not None:
            if current in chain:
                cycle = ' -> '.join(chain + [current])
                raise LayoutCycleError(f"layout cycle: {cycle}")
            if current not in self._templates:
                raise UnknownLayoutError(f"layout '{chain[-1]}' extends unknown layout '{current}'")
            chain.append(current)
            current = self._parents.get(current)
        return chain

    def __contains__(self, name):
        return name in self._chains

    def names(self):
        return sorted(self._chains)

    def chain(self, name, source=None):
        """Return the layout chain for a name, innermost layout first."""
        if name in self._chains:
            return list(self._chains[name])
        if name in self._broken:
            error = self._broken[name]
            raise type(error)(error.message, source)
        raise UnknownLayoutError(f"unknown layout '{name}'", source)

    def loader_mapping(self):
        """Template bodies keyed the way Jinja2 includes and extends refer to them."""
        mapping = {}
        for name, body in self._templates.items():
            mapping[name] = body
            mapping[f'{name}.html'] = body
        return mapping
