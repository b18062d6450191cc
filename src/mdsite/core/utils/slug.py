"""Slug generation for anchors, tags, and URL segments"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def urlize(segment: str) -> str:
    """Lowercase a path segment and hyphenate whitespace, keeping other characters."""
    return re.sub(r'\s+', '-', segment.strip().lower())
