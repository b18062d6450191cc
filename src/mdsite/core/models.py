"""Front matter schema and intermediate data models for the build pipeline"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Optional
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field, field_validator


DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _as_datetime(value: date | datetime) -> datetime:
    """Normalise a front matter date to an aware datetime (naive values are taken as UTC)."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class Cover(BaseModel):
    model_config = ConfigDict(extra="forbid")
    image:   str
    alt:     str = ""
    caption: str = ""
    hidden:  Optional[bool] = None          # None defers to params.cover


class FrontMatter(BaseModel):
    """Recognised metadata header fields; unrecognised keys are kept as page params."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title:       str = Field(min_length=1)
    date:        datetime
    summary:     Optional[str] = None
    description: Optional[str] = None
    tags:        list[str] = []
    draft:       bool = False
    slug:        Optional[str] = None
    expiry_date: Optional[datetime] = Field(default=None, alias="expiryDate")
    show_toc:    Optional[bool] = Field(default=None, alias="showToc")
    toc_open:    Optional[bool] = Field(default=None, alias="TocOpen")
    toc_side:    bool = Field(default=False, alias="TocSide")
    comments:    Optional[bool] = None
    layout:      Optional[str] = None          # template name without .html; default single
    cover:       Optional[Cover] = None

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()

    @field_validator("date", "expiry_date", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> Any:
        # unquoted YAML dates arrive as datetime.date; quoted ones as 'YYYY-MM-DD' strings
        if isinstance(v, str) and DATE_ONLY_RE.match(v.strip()):
            v = date.fromisoformat(v.strip())
        if isinstance(v, (date, datetime)):
            return _as_datetime(v)
        return v

    @field_validator("date", "expiry_date")
    @classmethod
    def _aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_datetime(v) if v is not None else None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v or []

    @property
    def params(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


@dataclass
class SourceDoc:
    """A parsed Document before rendering: validated header plus raw Markdown body."""
    path:        Path                  # on-disk path
    rel_path:    PurePosixPath         # relative to the content root; the Document identity
    frontmatter: FrontMatter
    body:        str

    @property
    def date(self) -> datetime:
        return self.frontmatter.date

    @property
    def is_bundle(self) -> bool:
        return self.rel_path.name == "index.md"

    @property
    def section(self) -> str:
        """Top-level content directory ('posts'), or '' for root-level pages."""
        return self.rel_path.parts[0] if len(self.rel_path.parts) > 1 else ""


@dataclass
class TocEntry:
    level:    int
    anchor:   str
    text:     str
    children: list["TocEntry"] = field(default_factory=list)


@dataclass(eq=False)
class Document:
    """A rendered Document: the unit every page, listing, and feed entry is built from."""
    source:       SourceDoc
    url:          str                  # site-relative permalink, e.g. '/posts/foo/'
    html:         str
    plain_text:   str
    summary:      str
    word_count:   int
    reading_time: int                  # minutes
    toc:          list[TocEntry] = field(default_factory=list)
    assets:       list[tuple[Path, str]] = field(default_factory=list)   # (source file, output-relative path)
    prev:         Optional["Document"] = None
    next:         Optional["Document"] = None

    @property
    def fm(self) -> FrontMatter:
        return self.source.frontmatter

    @property
    def title(self) -> str:
        return self.fm.title

    @property
    def date(self) -> datetime:
        return self.fm.date

    @property
    def rel_path(self) -> PurePosixPath:
        return self.source.rel_path

    @property
    def tags(self) -> list[str]:
        return self.fm.tags

    @property
    def output_path(self) -> str:
        """Output-relative file path: '/posts/foo/' -> 'posts/foo/index.html'."""
        return url_to_output_path(self.url)


def url_to_output_path(url: str) -> str:
    """Map a pretty URL to the index.html that serves it; percent-escapes are decoded for the file path."""
    stem = unquote(url.strip("/"))
    return f"{stem}/index.html" if stem else "index.html"
