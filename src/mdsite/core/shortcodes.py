"""Shortcode expansion: the figure directive and local asset resolution"""

import html
import posixpath
import re
from dataclasses import dataclass, field
from pathlib import Path

from markdown_it import MarkdownIt

from mdsite.core.errors import AssetError, DocumentError
from mdsite.core.models import SourceDoc
from mdsite.util.log import get_logger


logger = get_logger(__name__)

SHORTCODE_RE = re.compile(r'\{\{([<%])\s*(/\*)?\s*([\w-]+)(.*?)(\*/)?\s*[>%]\}\}', re.DOTALL)
ATTR_RE = re.compile(r'''([\w-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"']+))''')
REMOTE_PREFIXES = ('http://', 'https://', '//', 'data:')

FIGURE_ATTRS = {'src', 'width', 'height', 'align', 'caption', 'alt', 'title', 'link', 'class'}
FIGURE_ALIGN = {'left', 'center', 'right'}


@dataclass
class Expansion:
    """Markdown with figure placeholders, and the HTML/assets each placeholder stands for."""
    body:         str
    placeholders: dict[str, str] = field(default_factory=dict)
    assets:       list[tuple[Path, str]] = field(default_factory=list)

    def restore(self, rendered: str) -> str:
        """Swap placeholders in rendered HTML for their figure markup."""
        for key, markup in self.placeholders.items():
            rendered = rendered.replace(f"<p>{key}</p>", markup).replace(key, markup)
        return rendered


def parse_attrs(text: str) -> dict[str, str]:
    """Parse 'key="value" key2=value2' shortcode attributes, in declaration order."""
    attrs = {}
    for m in ATTR_RE.finditer(text):
        key, dq, sq, bare = m.groups()
        attrs[key] = next(v for v in (dq, sq, bare) if v is not None)
    return attrs


def is_remote(src: str) -> bool:
    return src.startswith(REMOTE_PREFIXES)


def resolve_asset(doc: SourceDoc, src: str, page_url: str, static_dir: Path) -> tuple[Path, str | None]:
    """Locate a local asset on disk and its output-relative destination.

    Absolute srcs ('/images/x.png') live in static_dir and are already copied
    with the static tree, so no destination is returned for them. Relative
    srcs resolve against the Document's directory and are copied beside the page.
    """
    clean = src.split('#', 1)[0].split('?', 1)[0]
    if clean.startswith('/'):
        path = static_dir / clean.lstrip('/')
        if not path.is_file():
            raise AssetError(doc.path, path)
        return path, None

    path = doc.path.parent / clean
    if not path.is_file():
        raise AssetError(doc.path, path)
    dest = posixpath.normpath(posixpath.join(page_url.strip('/'), clean))
    if dest.startswith('..'):
        raise DocumentError(doc.path, f"asset {src} resolves outside the output directory")
    return path, dest


def render_figure(attrs: dict[str, str], md: MarkdownIt) -> str:
    """Figure markup matching the theme's figure partial."""
    classes = [c for c in (attrs.get('class'), f"align-{attrs['align']}" if 'align' in attrs else None) if c]
    class_attr = f' class="{html.escape(" ".join(classes))}"' if classes else ''

    img = [f'<img loading="lazy" src="{html.escape(attrs["src"])}"']
    alt = attrs.get('alt', attrs.get('caption', ''))
    img.append(f' alt="{html.escape(alt)}"')
    for dim in ('width', 'height'):
        if dim in attrs:
            img.append(f' {dim}="{html.escape(attrs[dim])}"')
    img.append('>')
    img_html = ''.join(img)
    if 'link' in attrs:
        img_html = f'<a href="{html.escape(attrs["link"])}">{img_html}</a>'

    parts = [f'<figure{class_attr}>', img_html]
    if attrs.get('title') or attrs.get('caption'):
        parts.append('<figcaption>')
        if attrs.get('title'):
            parts.append(f'<h4>{html.escape(attrs["title"])}</h4>')
        if attrs.get('caption'):
            parts.append(f'<p>{md.renderInline(attrs["caption"])}</p>')
        parts.append('</figcaption>')
    parts.append('</figure>')
    return ''.join(parts)


def expand_shortcodes(doc: SourceDoc, page_url: str, static_dir: Path, md: MarkdownIt) -> Expansion:
    """Replace figure shortcodes in the Document body with block placeholders.

    Escaped shortcodes ('{{</* figure */>}}') are emitted literally. Unknown
    shortcodes are left in place with a warning.
    """
    expansion = Expansion(body='')
    seen_assets: set[str] = set()

    def _replace(m: re.Match) -> str:
        delim, esc_open, name, inner, esc_close = m.groups()
        if esc_open and esc_close:
            close = '>' if delim == '<' else '%'
            return f'{{{{{delim} {name}{inner.rstrip()} {close}}}}}'
        if name != 'figure':
            logger.warning("unsupported shortcode left as-is", shortcode=name, path=str(doc.path))
            return m.group(0)

        attrs = parse_attrs(inner)
        unknown = sorted(set(attrs) - FIGURE_ATTRS)
        if unknown:
            raise DocumentError(doc.path, f"figure: unrecognized attribute(s) {', '.join(unknown)}")
        if not attrs.get('src'):
            raise DocumentError(doc.path, "figure: missing required attribute src")
        if 'align' in attrs and attrs['align'] not in FIGURE_ALIGN:
            raise DocumentError(doc.path, f"figure: align must be one of {sorted(FIGURE_ALIGN)}")

        src = attrs['src']
        if not is_remote(src):
            path, dest = resolve_asset(doc, src, page_url, static_dir)
            if dest and dest not in seen_assets:
                seen_assets.add(dest)
                expansion.assets.append((path, dest))

        key = f"MDSITEFIGURE{len(expansion.placeholders)}Z"
        expansion.placeholders[key] = render_figure(attrs, md)
        return f"\n\n{key}\n\n"

    expansion.body = SHORTCODE_RE.sub(_replace, doc.body)
    return expansion
