"""Site configuration document: schema, validation, and config.yml loader"""

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mdsite.core.errors import ConfigError


OUTPUT_FORMATS = ("HTML", "RSS", "JSON")


class _Strict(BaseModel):
    """Recognised keys only; immutable once loaded."""
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class MenuEntry(_Strict):
    name:   str
    url:    str
    weight: int = 0


class Menu(_Strict):
    main: list[MenuEntry] = []

    @field_validator("main")
    @classmethod
    def _by_weight(cls, entries: list[MenuEntry]) -> list[MenuEntry]:
        # sorted() is stable: equal weights keep their declared order
        return sorted(entries, key=lambda e: e.weight)


class SocialIcon(_Strict):
    name: str
    url:  str


class HomeInfo(_Strict):
    title:   str = Field(default="", alias="Title")
    content: str = Field(default="", alias="Content")


class CoverParams(_Strict):
    hidden:           bool = False
    hidden_in_list:   bool = Field(default=False, alias="hiddenInList")
    hidden_in_single: bool = Field(default=False, alias="hiddenInSingle")


class Utterances(_Strict):
    repo:       str
    issue_term: str = Field(default="pathname", alias="issueTerm")
    label:      Optional[str] = None


class Params(_Strict):
    env:                  str = "development"
    title:                Optional[str] = None
    description:          str = ""
    author:               Optional[str] = None
    default_theme:        Literal["light", "dark", "auto"] = Field(default="auto", alias="defaultTheme")
    show_reading_time:    bool = Field(default=False, alias="showReadingTime")
    show_post_nav_links:  bool = Field(default=False, alias="showPostNavLinks")
    show_bread_crumbs:    bool = Field(default=False, alias="showBreadCrumbs")
    show_code_copy:       bool = Field(default=False, alias="showCodeCopyButtons")
    show_toc:             bool = Field(default=False, alias="showToc")
    toc_open:             bool = Field(default=False, alias="TocOpen")
    disable_scroll_to_top: bool = Field(default=False, alias="disableScrollToTop")
    hide_footer:          bool = Field(default=False, alias="hideFooter")
    image_zoom:           bool = Field(default=False, alias="EnableImageZoom")
    comments:             bool = False
    utterances:           Optional[Utterances] = None
    home_info:            Optional[HomeInfo] = Field(default=None, alias="homeInfoParams")
    social_icons:         list[SocialIcon] = Field(default=[], alias="socialIcons")
    cover:                CoverParams = CoverParams()


class Outputs(_Strict):
    home: list[str] = list(OUTPUT_FORMATS)

    @field_validator("home")
    @classmethod
    def _known_formats(cls, formats: list[str]) -> list[str]:
        upper = [f.upper() for f in formats]
        unknown = [f for f in upper if f not in OUTPUT_FORMATS]
        if unknown:
            raise ValueError(f"unknown output format(s) {unknown}; expected a subset of {list(OUTPUT_FORMATS)}")
        if "HTML" not in upper:
            raise ValueError("HTML output cannot be disabled")
        return list(dict.fromkeys(upper))


class Minify(_Strict):
    disable_xml:   bool = Field(default=False, alias="disableXML")
    minify_output: bool = Field(default=False, alias="minifyOutput")


class GoldmarkRenderer(_Strict):
    unsafe: bool = False


class Goldmark(_Strict):
    renderer: GoldmarkRenderer = GoldmarkRenderer()


class Highlight(_Strict):
    no_classes: bool = Field(default=True, alias="noClasses")
    style:      str  = "monokai"


class Markup(_Strict):
    goldmark:  Goldmark = Goldmark()
    highlight: Highlight = Highlight()


class SiteConfig(_Strict):
    base_url:          str = Field(alias="baseURL")
    title:             str
    theme:             Optional[str] = None
    language_code:     str = Field(default="en-us", alias="languageCode")
    paginate:          int = Field(default=10, ge=1)
    inline_shortcodes: bool = Field(default=False, alias="enableInlineShortcodes")
    robots_txt:        bool = Field(default=False, alias="enableRobotsTXT")
    build_drafts:      bool = Field(default=False, alias="buildDrafts")
    build_future:      bool = Field(default=False, alias="buildFuture")
    build_expired:     bool = Field(default=False, alias="buildExpired")
    enable_emoji:      bool = Field(default=False, alias="enableEmoji")
    google_analytics:  Optional[str] = Field(default=None, alias="googleAnalytics")
    minify:            Minify = Minify()
    outputs:           Outputs = Outputs()
    params:            Params = Params()
    menu:              Menu = Menu()
    markup:            Markup = Markup()

    @field_validator("base_url")
    @classmethod
    def _trailing_slash(cls, url: str) -> str:
        if not url.strip():
            raise ValueError("baseURL must not be empty")
        return url if url.endswith("/") else url + "/"

    def has_output(self, fmt: str) -> bool:
        return fmt.upper() in self.outputs.home

    def abs_url(self, rel: str) -> str:
        """Join a site-relative URL ('/posts/x/' or 'archive') onto baseURL."""
        if "://" in rel or rel.startswith("//"):
            return rel
        return self.base_url + rel.lstrip("/")


def _describe(e: ValidationError) -> str:
    """Summarise a ValidationError as 'field.path: message' lines."""
    lines = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        msg = "unrecognized option" if err["type"] == "extra_forbidden" else err["msg"]
        lines.append(f"{loc}: {msg}")
    return "; ".join(lines)


def parse_site_config(data: dict[str, Any]) -> SiteConfig:
    """Validate a raw configuration mapping into a SiteConfig."""
    try:
        return SiteConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid site configuration: {_describe(e)}") from e


def load_site_config(path: Path) -> SiteConfig:
    """Read and validate the site configuration document at path."""
    if not path.is_file():
        raise ConfigError(f"Site configuration not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid {path.name}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {path.name}: expected a mapping, got {type(data).__name__}")
    return parse_site_config(data)
