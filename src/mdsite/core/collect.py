"""Publishing filters, ordering, tag taxonomy, archive grouping, and pagination"""

import calendar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence, TypeVar
from urllib.parse import quote

from mdsite.core.errors import DocumentError
from mdsite.core.models import Document, SourceDoc
from mdsite.core.siteconfig import SiteConfig
from mdsite.core.utils.slug import urlize
from mdsite.util.log import get_logger


logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class Term:
    """One tag: display name, URL slug (unescaped, as written to disk), and its Documents in feed order."""
    name: str
    slug: str
    docs: list[Document] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"/tags/{quote(self.slug)}/"


@dataclass
class ArchiveMonth:
    month: int
    docs:  list[Document]

    @property
    def name(self) -> str:
        return calendar.month_name[self.month]


@dataclass
class ArchiveYear:
    year:   int
    months: list[ArchiveMonth]

    @property
    def count(self) -> int:
        return sum(len(m.docs) for m in self.months)


@dataclass
class Pager:
    number:   int
    total:    int
    items:    list
    url:      str
    prev_url: str | None = None
    next_url: str | None = None


def filter_published(
    docs: list[SourceDoc],
    config: SiteConfig,
    now: datetime,
    drafts: bool = False,
    future: bool = False,
    ) -> list[SourceDoc]:
    """Drop drafts, future-dated, and expired Documents unless the config (or flags) include them."""
    keep = []
    for doc in docs:
        fm = doc.frontmatter
        if fm.draft and not (config.build_drafts or drafts):
            logger.debug("skipping draft", path=str(doc.rel_path))
            continue
        if fm.date > now and not (config.build_future or future):
            logger.debug("skipping future document", path=str(doc.rel_path), date=fm.date.isoformat())
            continue
        if fm.expiry_date is not None and fm.expiry_date <= now and not config.build_expired:
            logger.debug("skipping expired document", path=str(doc.rel_path))
            continue
        keep.append(doc)
    return keep


def sort_documents(docs: Sequence[T]) -> list[T]:
    """Publish date descending; equal dates fall back to content path ascending.

    Works on SourceDocs and rendered Documents alike.
    """
    by_path = sorted(docs, key=lambda d: d.rel_path.as_posix())
    return sorted(by_path, key=lambda d: d.date, reverse=True)


def tag_url(name: str) -> str:
    """Site-relative URL of a tag page: 'C#' -> '/tags/c%23/'."""
    return f"/tags/{quote(urlize(name))}/"


def group_by_tag(docs: Sequence[Document]) -> list[Term]:
    """Collect tags across sorted docs; tags with the same slug merge under the first-seen name."""
    terms: dict[str, Term] = {}
    for doc in docs:
        for name in dict.fromkeys(doc.tags):
            slug = urlize(name)
            if slug in ("", ".", "..") or "/" in slug:
                raise DocumentError(doc.source.path, f"tag {name!r} does not map to a URL segment")
            term = terms.setdefault(slug, Term(name=name, slug=slug))
            if not term.docs or term.docs[-1] is not doc:
                term.docs.append(doc)
    return [terms[slug] for slug in sorted(terms)]


def group_archive(docs: Sequence[Document]) -> list[ArchiveYear]:
    """Year -> month -> docs, newest first. Buckets use the UTC date so mixed offsets group consistently."""
    years: dict[int, dict[int, list[Document]]] = {}
    for doc in sort_documents(docs):
        when = doc.date.astimezone(timezone.utc)
        years.setdefault(when.year, {}).setdefault(when.month, []).append(doc)
    return [
        ArchiveYear(year=y, months=[ArchiveMonth(month=m, docs=years[y][m]) for m in sorted(years[y], reverse=True)])
        for y in sorted(years, reverse=True)
    ]


def pager_url(base: str, number: int) -> str:
    return base if number == 1 else f"{base}page/{number}/"


def paginate(items: Sequence[T], size: int, base: str = "/") -> list[Pager]:
    """Split items into pages; page 1 lives at base, page N at base/page/N/. Always at least one page."""
    chunks = [list(items[i:i + size]) for i in range(0, len(items), size)] or [[]]
    total = len(chunks)
    return [
        Pager(
            number=n,
            total=total,
            items=chunk,
            url=pager_url(base, n),
            prev_url=pager_url(base, n - 1) if n > 1 else None,
            next_url=pager_url(base, n + 1) if n < total else None,
        )
        for n, chunk in enumerate(chunks, start=1)
    ]


def link_neighbours(docs: list[Document]) -> None:
    """Set prev (newer) and next (older) on each doc of a sorted list."""
    for i, doc in enumerate(docs):
        doc.prev = docs[i - 1] if i > 0 else None
        doc.next = docs[i + 1] if i + 1 < len(docs) else None
