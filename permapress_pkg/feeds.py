"""
RSS feed and XML sitemap generation.

Both outputs are derived only from the document set, never from the wall
clock, so an unchanged site rebuilds byte for byte.
"""

import html
import re
from datetime import datetime, time, timezone
from email.utils import format_datetime
from urllib.parse import urlparse
from xml.sax.saxutils import escape

FEED_PATH = '/feed.xml'
SITEMAP_PATH = '/sitemap.xml'


def site_title_from_url(url):
    domain = urlparse(url).netloc.replace("www.", "")
    return domain


def absolute_url(site_url, path):
    return f"{site_url.rstrip('/')}{path}"


def rfc822_date(value):
    return format_datetime(datetime.combine(value, time.min, tzinfo=timezone.utc))


def clean_description(raw_description):
    """Strip markup and collapse whitespace for an XML description."""
    text = html.unescape(str(raw_description))
    text = re.sub(r'<.*?>', '', text)
    text = re.sub(r'\s+', ' ', text)
    return escape(text.strip())


def generate_rss_feed(entries, site_url, site_name=None, limit=20):
    """
    Generate an RSS 2.0 feed from listing entries, newest first.

    Entries without a date are left out; lastBuildDate is the newest entry's
    date.
    """
    if not site_name:
        site_name = site_title_from_url(site_url)

    dated = [entry for entry in entries if entry.get('date')][:limit]

    rss_content = f'''<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
<channel>
<title>{escape(site_name)}</title>
<link>{escape(site_url)}</link>
<description>Latest posts from {escape(site_name)}</description>
'''
    if dated:
        rss_content += f"<lastBuildDate>{rfc822_date(dated[0]['date'])}</lastBuildDate>\n"

    for entry in dated:
        link = escape(absolute_url(site_url, entry['url']))
        rss_content += f'''
<item>
<title>{escape(entry.get('title', 'Untitled'))}</title>
<link>{link}</link>
<description>{clean_description(entry.get('excerpt', ''))}</description>
<pubDate>{rfc822_date(entry['date'])}</pubDate>
<guid>{link}</guid>
</item>'''

    rss_content += '''
</channel>
</rss>
'''
    return rss_content


def format_xml_sitemap_entry(url, lastmod=None):
    """Format a single sitemap entry."""
    entry = f"<url>\n<loc>{escape(url)}</loc>\n"
    if lastmod:
        entry += f"<lastmod>{lastmod.strftime('%Y-%m-%d')}</lastmod>\n"
    return entry + "</url>\n"


def generate_xml_sitemap(site_url, paths):
    """
    Generate an XML sitemap for (path, lastmod) pairs.

    Paths are listed in sorted order; lastmod may be None.
    """
    sitemap_content = '''<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
'''
    for path, lastmod in sorted(paths, key=lambda item: item[0]):
        sitemap_content += format_xml_sitemap_entry(absolute_url(site_url, path), lastmod)
    sitemap_content += '</urlset>\n'
    return sitemap_content
