import logging
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from .document import build_document
from .errors import DocumentError, RouteCollisionError
from .feeds import FEED_PATH, SITEMAP_PATH, generate_rss_feed, generate_xml_sitemap
from .frontmatter import parse_front_matter
from .layouts import LayoutRegistry
from .render import BodyRenderer, listing_entry
from .routes import assign_tag_routes, output_path_for, resolve_routes
from .tags import build_tag_index, listing_order

COLLECT = 'collect'
FAIL_FAST = 'fail-fast'
FAILURE_POLICIES = (COLLECT, FAIL_FAST)

# Per-process renderer for pool workers
worker_state = {}


@dataclass(frozen=True)
class OutputPage:
    path: str
    owner: str
    content: str

    @property
    def output_path(self):
        return output_path_for(self.path)


@dataclass(frozen=True)
class BuildIssue:
    source: str
    kind: str
    message: str

    @classmethod
    def from_error(cls, error):
        return cls(error.source or '<unknown>', type(error).__name__, error.message)

    def __str__(self):
        return f"{self.source}: {self.kind}: {self.message}"


@dataclass
class BuildReport:
    routes: List[str] = field(default_factory=list)
    issues: List[BuildIssue] = field(default_factory=list)

    @property
    def ok(self):
        return not self.issues


@dataclass
class BuildResult:
    pages: List[OutputPage]
    report: BuildReport


def load_document(source):
    """Parse a SourceDocument into a Document, raising DocumentError on failure."""
    metadata, body = parse_front_matter(source.text, source.filename)
    return build_document(source.filename, metadata, body)


def initializer(layout_sources, site):
    """Build the renderer once for each worker process."""
    worker_state['renderer'] = BodyRenderer(LayoutRegistry(layout_sources), site)


def load_task(source):
    try:
        return load_document(source), None
    except DocumentError as e:
        return None, BuildIssue.from_error(e)


def render_task(route, tag_routes):
    try:
        return worker_state['renderer'].render_document(route.document, route, tag_routes), None
    except DocumentError as e:
        return None, BuildIssue.from_error(e)


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno > logging.INFO:
            return True
        allowed_messages = [
            "Site build completed in",
            "Generated route:",
            "Total documents rendered:",
            "Total tag pages generated:",
            "Total build issues:",
            "Building index page",
            "Generating RSS feed",
            "Generating XML sitemap",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


def setup_logging(log_dir='logs', level=logging.INFO):
    """Set up the console and file handlers of the Permapress logger."""
    logger = logging.getLogger('Permapress')
    logger.setLevel(logging.DEBUG)

    if not logger.handlers:
        # Console handler with filter
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.addFilter(InfoFilter())
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        logger.addHandler(console_handler)

        # File handler for all logs
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            log_filename = datetime.now().strftime('permapress_%Y-%m-%d_%H-%M-%S.log')
            file_handler = logging.FileHandler(os.path.join(log_dir, log_filename))
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(file_handler)

    return logger


class SiteAssembler:
    """
    Turn a set of source documents into rendered output pages.

    Documents are processed in filename order. Per-document failures are
    collected into the build report (or raised straight away with the
    'fail-fast' policy); a route collision always aborts the build.
    """

    def __init__(self, registry, site_url=None, site_title=None, site_tagline=None,
                 tag_base='tags', tag_layout='tag', index_layout='index', generate_index=True,
                 include_drafts=False, failure_policy=COLLECT, workers=1, parallel_threshold=12,
                 feed_limit=20):
        if failure_policy not in FAILURE_POLICIES:
            raise ValueError(f"Unknown failure policy: {failure_policy}")
        self.registry = registry
        self.site_url = site_url.rstrip('/') if site_url else None
        self.site_title = site_title
        self.site_tagline = site_tagline
        self.tag_base = tag_base
        self.tag_layout = tag_layout
        self.index_layout = index_layout
        self.generate_index = generate_index
        self.include_drafts = include_drafts
        self.failure_policy = failure_policy
        self.workers = max(1, workers or 1)
        self.parallel_threshold = parallel_threshold
        self.feed_limit = feed_limit
        self.logger = logging.getLogger('Permapress.core')

    def _use_pool(self, task_count):
        return (self.workers > 1 and task_count >= self.parallel_threshold
                and self.failure_policy != FAIL_FAST)

    def _record(self, issues, error):
        if self.failure_policy == FAIL_FAST:
            raise error
        issue = BuildIssue.from_error(error)
        self.logger.error(f"Skipping {issue.source}: {issue.kind}: {issue.message}")
        issues.append(issue)

    def load_documents(self, sources, issues):
        """Parse and model every source, in order."""
        documents = []
        if self._use_pool(len(sources)):
            self.logger.info(f"Using multiprocessing for {len(sources)} files with {self.workers} workers")
            with ProcessPoolExecutor(max_workers=self.workers) as executor:
                futures = [executor.submit(load_task, source) for source in sources]
                results = [future.result() for future in futures]
            for document, issue in results:
                if issue:
                    self.logger.error(f"Skipping {issue.source}: {issue.kind}: {issue.message}")
                    issues.append(issue)
                else:
                    documents.append(document)
            return documents

        for source in sources:
            try:
                documents.append(load_document(source))
            except DocumentError as e:
                self._record(issues, e)
        return documents

    def render_documents(self, routes, tag_routes, renderer, site, issues):
        """Render every routed document; returns {source: OutputPage}."""
        rendered = {}
        if self._use_pool(len(routes)):
            with ProcessPoolExecutor(max_workers=self.workers, initializer=initializer,
                                     initargs=(self.registry.sources, site)) as executor:
                futures = [executor.submit(render_task, route, tag_routes) for route in routes]
                results = [future.result() for future in futures]
            for route, (content, issue) in zip(routes, results):
                if issue:
                    self.logger.error(f"Skipping {issue.source}: {issue.kind}: {issue.message}")
                    issues.append(issue)
                else:
                    rendered[route.owner] = OutputPage(route.path, route.owner, content)
            return rendered

        for route in routes:
            try:
                content = renderer.render_document(route.document, route, tag_routes)
            except DocumentError as e:
                self._record(issues, e)
                continue
            rendered[route.owner] = OutputPage(route.path, route.owner, content)
            self.logger.debug(f"Rendered {route.owner} -> {route.path}")
        return rendered

    def reserved_routes(self):
        """Paths owned by the generated index, feed and sitemap."""
        reserved = {}
        if self.generate_index:
            reserved['/'] = 'home index'
        if self.site_url:
            reserved[FEED_PATH] = 'RSS feed'
            reserved[SITEMAP_PATH] = 'XML sitemap'
        return reserved

    def site_context(self, routes, tag_routes):
        tag_index = build_tag_index([route.document for route in routes])
        return {
            'url': self.site_url,
            'title': self.site_title,
            'tagline': self.site_tagline,
            'tags': [
                {'name': tag, 'url': tag_routes[tag], 'count': len(docs)}
                for tag, docs in tag_index.items()
            ],
            'pages': [
                {'title': route.document.display_title, 'url': route.path}
                for route in routes if not route.document.is_post
            ],
        }

    def render_listing(self, renderer, layout, title, path, entries, owner, issues, tag=None):
        try:
            content = renderer.render_listing(layout, title, path, entries, owner, tag=tag)
        except DocumentError as e:
            self._record(issues, e)
            return None
        return OutputPage(path, owner, content)

    def assemble(self, sources):
        """Run the whole pipeline and return a BuildResult."""
        sources = sorted(sources, key=lambda s: s.filename)
        issues = []
        self.logger.info(f"Assembling {len(sources)} source documents")

        documents = self.load_documents(sources, issues)
        if not self.include_drafts:
            drafts = [doc for doc in documents if not doc.published]
            for doc in drafts:
                self.logger.debug(f"Skipping draft {doc.source}")
            documents = [doc for doc in documents if doc.published]

        # Routing needs the complete document set
        reserved = self.reserved_routes()
        routes, failures = resolve_routes(documents, reserved)
        for error in failures:
            self._record(issues, error)
        tag_routes = assign_tag_routes(build_tag_index([route.document for route in routes]), self.tag_base)

        # Navigation and tag counts describe only documents that render, so
        # a render failure means the survivors are rendered again without it
        candidates = routes
        while True:
            site = self.site_context(candidates, tag_routes)
            renderer = BodyRenderer(self.registry, site)
            rendered = self.render_documents(candidates, tag_routes, renderer, site, issues)
            if len(rendered) == len(candidates):
                break
            candidates = [route for route in candidates if route.owner in rendered]
            self.logger.debug(f"Re-rendering {len(candidates)} documents without the failed ones")

        pages = [rendered[route.owner] for route in candidates]
        routes_by_source = {route.owner: route for route in candidates}

        entries = {
            source: listing_entry(route.document, route, renderer)
            for source, route in routes_by_source.items()
        }

        # Only tag pages that are actually emitted can collide with documents
        tag_index = build_tag_index([route.document for route in candidates])
        owners = dict(reserved)
        owners.update({route.path: route.owner for route in candidates})
        for tag in tag_index:
            if tag_routes[tag] in owners:
                raise RouteCollisionError(tag_routes[tag], owners[tag_routes[tag]], f"tag page '{tag}'")

        tag_pages = 0
        for tag, tagged in tag_index.items():
            tag_entries = [entries[doc.source] for doc in tagged]
            page = self.render_listing(renderer, self.tag_layout, tag, tag_routes[tag], tag_entries,
                                       f"tag page '{tag}'", issues, tag=tag)
            if page:
                pages.append(page)
                tag_pages += 1

        posts = listing_order([routes_by_source[s].document for s in routes_by_source
                               if routes_by_source[s].document.is_post])
        post_entries = [entries[doc.source] for doc in posts]

        if self.generate_index:
            self.logger.info("Building index page")
            page = self.render_listing(renderer, self.index_layout, self.site_title or 'Home', '/',
                                       post_entries, 'home index', issues)
            if page:
                pages.append(page)

        if self.site_url:
            self.logger.info("Generating RSS feed")
            pages.append(OutputPage(FEED_PATH, 'RSS feed', generate_rss_feed(
                post_entries, self.site_url, self.site_title, self.feed_limit)))
            self.logger.info("Generating XML sitemap")
            sitemap_paths = [(route.path, route.document.publish_date) for route in routes_by_source.values()]
            sitemap_paths += [(page.path, None) for page in pages if page.owner not in routes_by_source
                              and page.path.endswith('/')]
            pages.append(OutputPage(SITEMAP_PATH, 'XML sitemap', generate_xml_sitemap(self.site_url, sitemap_paths)))

        report = BuildReport(routes=[page.path for page in pages], issues=issues)
        self.logger.info(f"Total documents rendered: {len(rendered)}")
        self.logger.info(f"Total tag pages generated: {tag_pages}")
        self.logger.info(f"Total build issues: {len(issues)}")
        return BuildResult(pages=pages, report=report)
