"""
Permapress - builds a static blog from front-matter tagged Markdown.

Posts and pages are parsed, routed to unique permalinks, grouped by tag and
rendered through Jinja2 layouts into a navigable set of HTML pages.
"""

__version__ = "1.0.0"

from .core import SiteAssembler, BuildResult, BuildReport, BuildIssue, OutputPage
from .document import Document, SourceDocument
from .layouts import LayoutRegistry

__all__ = [
    'SiteAssembler', 'BuildResult', 'BuildReport', 'BuildIssue', 'OutputPage',
    'Document', 'SourceDocument', 'LayoutRegistry',
]
