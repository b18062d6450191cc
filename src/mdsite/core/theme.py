"""Theme resolution and Jinja2 environment: site layouts, then the named theme, then the bundled default"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

from mdsite.core.collect import tag_url
from mdsite.core.errors import BuildError
from mdsite.core.siteconfig import SiteConfig
from mdsite.util.log import get_logger


logger = get_logger(__name__)

BUNDLED_THEME = Path(__file__).resolve().parent.parent / "themes" / "default"


@dataclass
class Theme:
    env:         Environment
    static_dirs: list[Path]        # copied in order; later directories win


def format_date(value: datetime) -> str:
    """'January 2, 2006' style, without platform-specific strftime flags."""
    return f"{value:%B} {value.day}, {value.year}"


def load_theme(root: Path, config: SiteConfig) -> Theme:
    """Resolve template search paths and static asset dirs for a site rooted at root."""
    layouts = []
    static_dirs = [BUNDLED_THEME / "static"]

    if (root / "layouts").is_dir():
        layouts.append(root / "layouts")

    if config.theme:
        theme_dir = root / "themes" / config.theme
        if (theme_dir / "layouts").is_dir():
            layouts.append(theme_dir / "layouts")
            if (theme_dir / "static").is_dir():
                static_dirs.append(theme_dir / "static")
        else:
            logger.warning("theme not found, using bundled default", theme=config.theme, path=str(theme_dir))

    layouts.append(BUNDLED_THEME / "layouts")

    env = Environment(
        loader=ChoiceLoader([FileSystemLoader(str(p)) for p in layouts]),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["date_format"] = format_date
    env.filters["tag_url"] = tag_url
    env.globals["site"] = config
    env.globals["abs_url"] = config.abs_url
    return Theme(env=env, static_dirs=static_dirs)


def render_template(theme: Theme, name: str, **context: Any) -> str:
    """Render a theme template, turning template failures into BuildErrors."""
    try:
        return theme.env.get_template(name).render(**context)
    except TemplateError as e:
        raise BuildError(f"Template {name} failed: {e}") from e
