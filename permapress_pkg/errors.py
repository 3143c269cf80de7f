"""
Exception hierarchy for Permapress builds.

Per-document errors derive from DocumentError and are collected into the
build report. RouteCollisionError is global and always aborts the build.
"""


class PermapressError(Exception):
    """Base class for every error raised by Permapress."""


class DocumentError(PermapressError):
    """An error confined to a single source document."""

    def __init__(self, message, source=None):
        self.source = source
        self.message = message
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class MalformedFrontMatterError(DocumentError):
    """The front matter block is unterminated or not a flat key/value mapping."""


class InvalidDocumentError(DocumentError):
    """The front matter is well formed but misses required fields."""


class InvalidPermalinkError(InvalidDocumentError):
    """An explicit permalink is not an absolute, fully resolved path."""


class UnknownLayoutError(DocumentError):
    """A layout name has no template, or its parent chain is broken."""


class LayoutCycleError(UnknownLayoutError):
    """A layout extends itself, directly or through its parents."""


class TemplateRenderError(DocumentError):
    """Jinja2 failed to compile or render a layout."""


class RouteCollisionError(PermapressError):
    """Two owners resolved to the same output path."""

    def __init__(self, path, first, second):
        self.path = path
        self.first = first
        self.second = second
        super().__init__(f"Route collision on {path}: {first} and {second}")
