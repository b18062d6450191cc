"""Unit tests for core/parse.py"""

from datetime import datetime, timezone
from pathlib import PurePosixPath

import pytest

from mdsite.core.errors import DocumentError
from mdsite.core.parse import discover_files, parse_dir, parse_file, permalink, split_frontmatter


def test_split_frontmatter_with_yaml():
    """split_frontmatter extracts the YAML header and returns the body."""
    fm, body = split_frontmatter("---\ntitle: Hello\n---\n# Body\n")
    assert fm == {"title": "Hello"}
    assert body == "# Body\n"


def test_split_frontmatter_crlf_and_bom():
    fm, body = split_frontmatter("\ufeff---\r\ntitle: Hello\r\n---\r\nBody\r\n")
    assert fm == {"title": "Hello"}
    assert body == "Body\r\n"


def test_split_frontmatter_missing_header():
    with pytest.raises(ValueError, match="missing"):
        split_frontmatter("# No frontmatter\n")


def test_split_frontmatter_not_a_mapping():
    with pytest.raises(ValueError, match="expected a mapping"):
        split_frontmatter("---\n- a\n- b\n---\nBody\n")


def test_discover_files_sorted_and_skips_section_index(tmp_path):
    """discover_files finds .md files recursively, sorted, without _index.md."""
    (tmp_path / "b.md").write_text("b")
    (tmp_path / "posts").mkdir()
    (tmp_path / "posts" / "a.md").write_text("a")
    (tmp_path / "posts" / "_index.md").write_text("section")
    (tmp_path / "posts" / "image.png").write_bytes(b"")
    files = discover_files(tmp_path)
    assert [p.relative_to(tmp_path).as_posix() for p in files] == ["b.md", "posts/a.md"]


def test_discover_files_missing_dir(tmp_path):
    with pytest.raises(DocumentError, match="content directory not found"):
        discover_files(tmp_path / "nope")


def test_parse_file_valid(tmp_path):
    """parse_file validates front matter and records the content-relative path."""
    f = tmp_path / "posts" / "hello.md"
    f.parent.mkdir()
    f.write_text("---\ntitle: Hello\ndate: 2023-01-01\ntags: [kotlin, android]\nsummary: Short\n---\nBody\n")
    doc = parse_file(f, tmp_path)
    assert doc.rel_path == PurePosixPath("posts/hello.md")
    assert doc.frontmatter.title == "Hello"
    assert doc.frontmatter.date == datetime(2023, 1, 1, tzinfo=timezone.utc)
    assert doc.frontmatter.tags == ["kotlin", "android"]
    assert doc.body == "Body\n"


def test_parse_file_display_flags(tmp_path):
    f = tmp_path / "a.md"
    f.write_text(
        "---\ntitle: A\ndate: 2023-01-01T10:30:00+02:00\nshowToc: true\nTocOpen: false\n"
        "TocSide: true\ncover:\n  image: cover.png\n  alt: Alt\nmath: true\n---\n"
    )
    fm = parse_file(f, tmp_path).frontmatter
    assert fm.show_toc is True
    assert fm.toc_open is False
    assert fm.toc_side is True
    assert fm.cover.image == "cover.png"
    assert fm.date.utcoffset().total_seconds() == 7200
    assert fm.params == {"math": True}


def test_parse_file_missing_title(tmp_path):
    """A missing title is a DocumentError naming the path and the field."""
    f = tmp_path / "untitled.md"
    f.write_text("---\ndate: 2023-01-01\n---\nBody\n")
    with pytest.raises(DocumentError) as exc:
        parse_file(f, tmp_path)
    assert exc.value.path == f
    assert "title: field required" in str(exc.value)
    assert str(f) in str(exc.value)


def test_parse_file_blank_title(tmp_path):
    f = tmp_path / "blank.md"
    f.write_text("---\ntitle: '   '\ndate: 2023-01-01\n---\n")
    with pytest.raises(DocumentError, match="title"):
        parse_file(f, tmp_path)


def test_parse_file_bad_date(tmp_path):
    f = tmp_path / "bad.md"
    f.write_text("---\ntitle: T\ndate: yesterday\n---\n")
    with pytest.raises(DocumentError, match="date"):
        parse_file(f, tmp_path)


def test_parse_file_invalid_yaml(tmp_path):
    f = tmp_path / "broken.md"
    f.write_text("---\ntitle: [unclosed\n---\n")
    with pytest.raises(DocumentError, match="invalid YAML front matter"):
        parse_file(f, tmp_path)


def test_parse_dir_first_failure_aborts(tmp_path):
    (tmp_path / "a.md").write_text("---\ntitle: A\ndate: 2023-01-01\n---\n")
    (tmp_path / "b.md").write_text("no header\n")
    with pytest.raises(DocumentError) as exc:
        parse_dir(tmp_path)
    assert exc.value.path.name == "b.md"


@pytest.mark.parametrize("rel,fm,expected", [
    ("posts/hello.md", {}, "/posts/hello/"),
    ("posts/hello/index.md", {}, "/posts/hello/"),
    ("posts/Hello World.md", {}, "/posts/hello-world/"),
    ("about.md", {}, "/about/"),
    ("posts/hello.md", {"slug": "custom"}, "/posts/custom/"),
    ("posts/hello/index.md", {"slug": "custom"}, "/posts/custom/"),
])
def test_permalink(make_source, rel, fm, expected):
    assert permalink(make_source(rel, **fm)) == expected


def test_permalink_root_index_rejected(make_source):
    with pytest.raises(DocumentError, match="site root"):
        permalink(make_source("index.md"))
