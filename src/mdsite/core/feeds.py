"""Feed documents: RSS 2.0, JSON search index, sitemap, robots.txt"""

import json
import xml.etree.ElementTree as ET
from datetime import datetime
from email.utils import format_datetime
from typing import Sequence

from mdsite.core.models import Document
from mdsite.core.siteconfig import SiteConfig


ATOM_NS = "http://www.w3.org/2005/Atom"
SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_DECL = '<?xml version="1.0" encoding="utf-8" standalone="yes"?>\n'

ET.register_namespace("atom", ATOM_NS)


def _text(parent: ET.Element, tag: str, text: str) -> ET.Element:
    el = ET.SubElement(parent, tag)
    el.text = text
    return el


def _serialize(root: ET.Element) -> str:
    ET.indent(root)
    return XML_DECL + ET.tostring(root, encoding="unicode") + "\n"


def build_rss(docs: Sequence[Document], config: SiteConfig) -> str:
    """RSS 2.0 channel over docs (already in feed order).

    lastBuildDate is the newest item's date so identical input yields identical bytes.
    """
    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    _text(channel, "title", config.title)
    _text(channel, "link", config.base_url)
    _text(channel, "description", config.params.description or f"Recent content on {config.title}")
    _text(channel, "generator", "mdsite")
    _text(channel, "language", config.language_code)
    if docs:
        _text(channel, "lastBuildDate", format_datetime(max(d.date for d in docs)))
    ET.SubElement(channel, f"{{{ATOM_NS}}}link", {
        "href": config.abs_url("index.xml"),
        "rel": "self",
        "type": "application/rss+xml",
    })
    for doc in docs:
        item = ET.SubElement(channel, "item")
        link = config.abs_url(doc.url)
        _text(item, "title", doc.title)
        _text(item, "link", link)
        _text(item, "pubDate", format_datetime(doc.date))
        _text(item, "guid", link)
        _text(item, "description", doc.summary)
    return _serialize(rss)


def search_entry(doc: Document, config: SiteConfig) -> dict:
    """One record of the client-side search corpus."""
    return {
        "title": doc.title,
        "content": doc.plain_text,
        "permalink": config.abs_url(doc.url),
        "summary": doc.summary,
        "date": doc.date.isoformat(),
        "tags": list(doc.tags),
    }


def build_json_index(docs: Sequence[Document], config: SiteConfig) -> str:
    """JSON feed consumed by the search page: a list of search entries in feed order."""
    return json.dumps([search_entry(d, config) for d in docs], ensure_ascii=False, indent=2) + "\n"


def build_sitemap(entries: Sequence[tuple[str, datetime | None]], config: SiteConfig) -> str:
    """Sitemap over (site-relative url, lastmod) pairs."""
    urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS})
    for url, lastmod in entries:
        node = ET.SubElement(urlset, "url")
        _text(node, "loc", config.abs_url(url))
        if lastmod is not None:
            _text(node, "lastmod", lastmod.date().isoformat())
    return _serialize(urlset)


def build_robots(config: SiteConfig) -> str:
    return f"User-agent: *\nAllow: /\nSitemap: {config.abs_url('sitemap.xml')}\n"
