"""File discovery, front matter extraction, and permalink assignment"""

import re
from pathlib import Path, PurePosixPath
from typing import Any

import yaml
from pydantic import ValidationError

from mdsite.core.errors import DocumentError
from mdsite.core.models import FrontMatter, SourceDoc
from mdsite.core.utils.slug import urlize
from mdsite.util.log import get_logger


logger = get_logger(__name__)

FRONTMATTER_RE = re.compile(r'^---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)', re.DOTALL)
MD_EXTENSIONS = {'.md', '.markdown'}
SECTION_INDEX = '_index.md'


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with the YAML header removed.

    Raises ValueError when the header is absent, is not valid YAML, or is not a mapping.
    """
    text = text.lstrip('\ufeff')
    m = FRONTMATTER_RE.match(text)
    if not m:
        raise ValueError("missing '---' front matter header")
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML front matter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"invalid YAML front matter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():]


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msg = "field required" if err["type"] == "missing" else err["msg"]
        parts.append(f"{loc}: {msg}")
    return "; ".join(parts)


def discover_files(content_dir: Path) -> list[Path]:
    """Return sorted Markdown Documents under content_dir, skipping section index files."""
    if not content_dir.is_dir():
        raise DocumentError(content_dir, "content directory not found")
    files = []
    for p in sorted(content_dir.rglob('*')):
        if not p.is_file() or p.suffix.lower() not in MD_EXTENSIONS:
            continue
        if p.name == SECTION_INDEX:
            logger.debug("skipping section index", path=str(p))
            continue
        files.append(p)
    return files


def parse_file(path: Path, content_dir: Path) -> SourceDoc:
    """Parse a single Document into a SourceDoc with validated front matter."""
    try:
        raw = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentError(path, f"unreadable: {e}") from e
    try:
        data, body = split_frontmatter(raw)
    except ValueError as e:
        raise DocumentError(path, str(e)) from e
    try:
        frontmatter = FrontMatter.model_validate(data)
    except ValidationError as e:
        raise DocumentError(path, _describe(e)) from e
    return SourceDoc(
        path=path,
        rel_path=PurePosixPath(path.relative_to(content_dir).as_posix()),
        frontmatter=frontmatter,
        body=body,
    )


def parse_dir(content_dir: Path) -> list[SourceDoc]:
    """Parse every Document under content_dir; the first failure aborts."""
    return [parse_file(p, content_dir) for p in discover_files(content_dir)]


def permalink(doc: SourceDoc) -> str:
    """Pretty URL for a Document: 'posts/foo.md' and 'posts/foo/index.md' both map to '/posts/foo/'."""
    rel = doc.rel_path
    segments = list(rel.parent.parts) if doc.is_bundle else [*rel.parent.parts, rel.stem]
    if doc.frontmatter.slug:
        if not segments:
            raise DocumentError(doc.path, "slug cannot be applied to the content root")
        segments[-1] = doc.frontmatter.slug
    segments = [urlize(s) for s in segments if s not in ('', '.')]
    if not segments:
        raise DocumentError(doc.path, "document maps to the site root")
    return "/" + "/".join(segments) + "/"
