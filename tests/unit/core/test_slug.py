"""Unit tests for core/utils/slug.py"""

import pytest

from mdsite.core.utils.slug import slugify, urlize


@pytest.mark.parametrize("text,expected", [
    ("Hello World", "hello-world"),
    ("my_file_name", "my-file-name"),
    ("  leading and trailing  ", "leading-and-trailing"),
    ("multiple---hyphens", "multiple-hyphens"),
    ("Special! Ch@rs#", "special-chrs"),
    ("Kotlin & Android", "kotlin-android"),
    ("", ""),
])
def test_slugify_basic(text, expected):
    """slugify converts text to lowercase hyphenated slug."""
    assert slugify(text) == expected


def test_slugify_preserves_hyphens():
    """slugify keeps existing hyphens intact."""
    assert slugify("already-slugified") == "already-slugified"


@pytest.mark.parametrize("segment,expected", [
    ("My Post", "my-post"),
    ("kotlin_tips", "kotlin_tips"),
    ("v1.2", "v1.2"),
])
def test_urlize_keeps_non_space_characters(segment, expected):
    """urlize lowercases and hyphenates whitespace only."""
    assert urlize(segment) == expected
