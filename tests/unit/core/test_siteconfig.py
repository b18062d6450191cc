"""Unit tests for core/siteconfig.py"""

import pytest

from mdsite.core.errors import ConfigError
from mdsite.core.siteconfig import load_site_config, parse_site_config


MINIMAL = {"baseURL": "https://example.com", "title": "Example"}


def test_minimal_config_defaults():
    """Only baseURL and title are required; everything else has defaults."""
    config = parse_site_config(MINIMAL)
    assert config.base_url == "https://example.com/"
    assert config.paginate == 10
    assert config.outputs.home == ["HTML", "RSS", "JSON"]
    assert config.markup.goldmark.renderer.unsafe is False


@pytest.mark.parametrize("missing", ["baseURL", "title"])
def test_missing_required_field(missing):
    """A missing required option is a ConfigError naming the field."""
    data = {k: v for k, v in MINIMAL.items() if k != missing}
    with pytest.raises(ConfigError, match=missing):
        parse_site_config(data)


def test_unknown_top_level_option():
    """Unrecognized top-level options are rejected."""
    with pytest.raises(ConfigError, match="baseUrl: unrecognized option"):
        parse_site_config({**MINIMAL, "baseUrl": "typo"})


def test_unknown_param_toggle():
    """Unrecognized params.* toggles are rejected with their dotted path."""
    with pytest.raises(ConfigError, match="params.showReadingTim"):
        parse_site_config({**MINIMAL, "params": {"showReadingTim": True}})


def test_param_toggles_by_hugo_name():
    """Feature toggles are read by their config names."""
    config = parse_site_config({**MINIMAL, "params": {
        "showReadingTime": True, "showCodeCopyButtons": True, "EnableImageZoom": True,
        "homeInfoParams": {"Title": "Hi", "Content": "Hello"},
        "socialIcons": [{"name": "github", "url": "https://github.com/x"}],
    }})
    assert config.params.show_reading_time is True
    assert config.params.show_code_copy is True
    assert config.params.image_zoom is True
    assert config.params.home_info.title == "Hi"
    assert config.params.social_icons[0].name == "github"


def test_outputs_case_insensitive_and_deduplicated():
    config = parse_site_config({**MINIMAL, "outputs": {"home": ["html", "rss", "RSS"]}})
    assert config.outputs.home == ["HTML", "RSS"]
    assert config.has_output("rss")
    assert not config.has_output("JSON")


def test_outputs_unknown_format():
    with pytest.raises(ConfigError, match="unknown output format"):
        parse_site_config({**MINIMAL, "outputs": {"home": ["HTML", "ATOM"]}})


def test_outputs_html_required():
    with pytest.raises(ConfigError, match="HTML output cannot be disabled"):
        parse_site_config({**MINIMAL, "outputs": {"home": ["RSS"]}})


def test_paginate_must_be_positive():
    with pytest.raises(ConfigError, match="paginate"):
        parse_site_config({**MINIMAL, "paginate": 0})


def test_menu_sorted_by_weight_stable():
    """Menu entries sort by weight; equal weights keep declared order."""
    config = parse_site_config({**MINIMAL, "menu": {"main": [
        {"name": "B", "url": "b"},
        {"name": "A", "url": "a"},
        {"name": "First", "url": "f", "weight": -1},
    ]}})
    assert [e.name for e in config.menu.main] == ["First", "B", "A"]


def test_abs_url():
    config = parse_site_config(MINIMAL)
    assert config.abs_url("/posts/x/") == "https://example.com/posts/x/"
    assert config.abs_url("archive") == "https://example.com/archive"
    assert config.abs_url("https://other.org/") == "https://other.org/"


def test_config_is_immutable():
    config = parse_site_config(MINIMAL)
    with pytest.raises(Exception):
        config.title = "changed"


def test_load_site_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_site_config(tmp_path / "config.yml")


def test_load_site_config_invalid_yaml(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("title: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid config.yml"):
        load_site_config(path)


def test_load_site_config_not_a_mapping(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="expected a mapping"):
        load_site_config(path)


def test_load_full_blog_config(tmp_path):
    """A full real-world config.yml with every recognised option loads cleanly."""
    path = tmp_path / "config.yml"
    path.write_text(ORIGINAL_CONFIG)
    config = load_site_config(path)
    assert config.theme == "PaperModX"
    assert config.paginate == 30
    assert config.google_analytics == "G-TEST"
    assert config.minify.minify_output is True
    assert config.params.cover.hidden_in_single is False
    assert [e.name for e in config.menu.main] == ["Archive", "Search"]
    assert config.markup.highlight.no_classes is False


ORIGINAL_CONFIG = """\
baseURL: https://blog.example.com/
languageCode: en-us
title: Example Author
theme: PaperModX
paginate: 30

enableInlineShortcodes: true
enableRobotsTXT: true
buildDrafts: false
buildFuture: false
buildExpired: false
enableEmoji: true

googleAnalytics: G-TEST

minify:
  disableXML: true
  minifyOutput: true

outputs:
  home:
    - HTML
    - RSS
    - JSON

params:
  env: production
  title: Example Author
  defaultTheme: light

  showReadingTime: true
  showPostNavLinks: true
  showBreadCrumbs: true
  showCodeCopyButtons: true
  disableScrollToTop: true
  hideFooter: true
  EnableImageZoom: true
  comments: true

  homeInfoParams:
    Title: Hi!
    Content: >
      I'm a Software Engineer.

  socialIcons:
    - name: github
      url: https://github.com/example/
    - name: rss
      url: "https://blog.example.com/index.xml"

  cover:
    hidden: true
    hiddenInSingle: false

menu:
  main:
    - name: Archive
      url: archive
    - name: Search
      url: search

markup:
  goldmark:
    renderer:
      unsafe: true
  highlight:
    noClasses: false
"""
