#!/usr/bin/env python3
"""
Command-line interface for Permapress.
"""

import os
import sys
import argparse
import time
from typing import List, Optional

from . import __version__
from .core import SiteAssembler, setup_logging, FAIL_FAST
from .errors import DocumentError, RouteCollisionError
from .layouts import LayoutRegistry
from .settings import PermapressSettings
from .sources import discover_sources
from .writer import write_site


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Permapress - Markdown blog builder')
    parser.add_argument('--content', type=str,
                        help='Content directory containing markdown posts and pages')
    parser.add_argument('--output', type=str,
                        help='Output directory for generated site')
    parser.add_argument('--layouts', type=str,
                        help='Directory of layout templates')
    parser.add_argument('--site-url', type=str,
                        help='Site URL for the RSS feed and sitemap')
    parser.add_argument('--site-title', type=str, help='Site title for metadata')
    parser.add_argument('--site-tagline', type=str, help='Site tagline for metadata')
    parser.add_argument('--tag-base', type=str,
                        help="Path segment for tag pages instead of 'tags'")
    parser.add_argument('--drafts', dest='include_drafts', action='store_true', default=None,
                        help='Include documents marked published: false')
    parser.add_argument('--no-index', dest='generate_index', action='store_false', default=None,
                        help='Do not generate the home index page')
    parser.add_argument('--fail-fast', dest='failure_policy', action='store_const', const=FAIL_FAST,
                        help='Stop at the first document error instead of collecting them')
    parser.add_argument('--workers', type=int,
                        help='Worker processes for large builds')
    parser.add_argument('--log-dir', type=str,
                        help='Directory for build log files')
    parser.add_argument('--no-log-file', action='store_true',
                        help='Do not write a build log file')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and exit')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings_loader = PermapressSettings()

    # Handle init command
    if args.init:
        config_path = settings_loader.create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        return 0

    try:
        settings_loader.load_settings()
    except (ValueError, IOError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Command line arguments take precedence
    args_dict = {k: v for k, v in vars(args).items() if v is not None}
    final_settings = settings_loader.merge_with_args(args_dict)

    output_dir = os.path.expanduser(final_settings['output'])
    log_dir = None if args.no_log_file else final_settings['log_dir']
    logger = setup_logging(log_dir)

    overall_start_time = time.time()
    try:
        registry = LayoutRegistry.from_directory(final_settings['layouts'])
        sources = discover_sources(final_settings['content'], exclude=[output_dir])

        assembler = SiteAssembler(
            registry,
            site_url=final_settings['site_url'],
            site_title=final_settings['site_title'],
            site_tagline=final_settings['site_tagline'],
            tag_base=final_settings['tag_base'],
            generate_index=final_settings['generate_index'],
            include_drafts=final_settings['include_drafts'],
            failure_policy=final_settings['failure_policy'],
            workers=final_settings['workers'],
            parallel_threshold=final_settings['parallel_threshold'],
            feed_limit=final_settings['feed_limit'],
        )
        result = assembler.assemble(sources)
        write_site(result.pages, output_dir)
    except RouteCollisionError as e:
        logger.error(f"Build aborted: {e}")
        return 1
    except DocumentError as e:
        logger.error(f"Build aborted: {type(e).__name__}: {e}")
        return 1
    except (ValueError, IOError) as e:
        logger.error(f"Error: {e}")
        return 1

    for route in result.report.routes:
        logger.info(f"Generated route: {route}")

    total_time = time.time() - overall_start_time
    logger.info(f"Site build completed in {total_time:.6f} seconds.")

    if not result.report.ok:
        logger.error(f"Build finished with {len(result.report.issues)} failing document(s):")
        for issue in result.report.issues:
            logger.error(f"  {issue}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
