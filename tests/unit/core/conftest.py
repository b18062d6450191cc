"""Shared fixtures for core unit tests"""

from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

import pytest

from mdsite.core.models import Document, FrontMatter, SourceDoc
from mdsite.core.render import make_parser
from mdsite.core.siteconfig import parse_site_config


SAMPLE_MD = """\
# Heading 1

A paragraph with **bold** text.

## Heading 2

- item one
- item two

```python
print("hello")
```

## Heading 2

Closing paragraph.
"""


@pytest.fixture(name="config")
def config_fixture():
    return parse_site_config({"baseURL": "https://example.com/", "title": "Example"})


@pytest.fixture(name="parser")
def parser_fixture(config):
    return make_parser(config)


def make_source(rel: str = "posts/a.md", root: Path = Path("/site/content"), body: str = "", **fm) -> SourceDoc:
    fm.setdefault("title", "A post")
    fm.setdefault("date", "2023-01-01")
    return SourceDoc(
        path=root / rel,
        rel_path=PurePosixPath(rel),
        frontmatter=FrontMatter.model_validate(fm),
        body=body,
    )


def make_doc(rel: str = "posts/a.md", url: str | None = None, **fm) -> Document:
    src = make_source(rel, **fm)
    return Document(
        source=src,
        url=url or "/" + rel.removesuffix(".md") + "/",
        html="<p>body</p>",
        plain_text="body",
        summary="body",
        word_count=1,
        reading_time=1,
    )


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    return make_doc


@pytest.fixture(name="make_source")
def make_source_fixture():
    return make_source


@pytest.fixture(name="now")
def now_fixture():
    return datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD
