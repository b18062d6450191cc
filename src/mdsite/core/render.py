"""Markdown rendering: markdown-it parser setup, heading anchors, TOC, highlighting, reading time"""

import html
import math
import re
from pathlib import Path

from markdown_it import MarkdownIt
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from mdsite.core.models import Document, SourceDoc, TocEntry
from mdsite.core.shortcodes import expand_shortcodes
from mdsite.core.siteconfig import SiteConfig
from mdsite.core.utils.slug import slugify
from mdsite.core.utils.tokens import heading_level, inline_text


WORDS_PER_MINUTE = 213
SUMMARY_WORDS = 70
TOC_MAX_LEVEL = 4

TAG_RE = re.compile(r'<[^>]+>')
EMOJI_RE = re.compile(r':([a-z0-9_+-]+):')
EMOJI = {
    'smile': '😄', 'grin': '😁', 'wink': '😉', 'joy': '😂', 'thinking': '🤔',
    'wave': '👋', 'thumbsup': '👍', '+1': '👍', 'thumbsdown': '👎', 'clap': '👏',
    'tada': '🎉', 'rocket': '🚀', 'fire': '🔥', 'bug': '🐛', 'warning': '⚠️',
    'heart': '❤️', 'eyes': '👀', 'coffee': '☕', 'bulb': '💡', 'memo': '📝',
    'white_check_mark': '✅', 'x': '❌', 'zap': '⚡', 'sparkles': '✨',
}


def _emoji_rule(state) -> None:
    """Core rule: replace :name: in text tokens (never in code spans or fences)."""
    for tok in state.tokens:
        if tok.type != 'inline' or not tok.children:
            continue
        for child in tok.children:
            if child.type == 'text':
                child.content = EMOJI_RE.sub(lambda m: EMOJI.get(m.group(1), m.group(0)), child.content)


def _render_fence(self, tokens, idx, options, env) -> str:
    """Fenced code: Pygments for known languages, escaped <pre><code> otherwise."""
    token = tokens[idx]
    lang = token.info.strip().split(maxsplit=1)[0] if token.info.strip() else ''
    code = token.content
    if lang:
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            lexer = None
        if lexer is not None:
            formatter = HtmlFormatter(noclasses=env.get('no_classes', True), style=env.get('style', 'monokai'), cssclass='highlight')
            return highlight(code, lexer, formatter)
        return f'<pre><code class="language-{html.escape(lang)}">{html.escape(code)}</code></pre>\n'
    return f'<pre><code>{html.escape(code)}</code></pre>\n'


def make_parser(config: SiteConfig) -> MarkdownIt:
    """Build the MarkdownIt instance for a site: gfm-like, raw HTML only when markup allows it."""
    md = MarkdownIt('gfm-like', options_update={
        'linkify': False,
        'html': config.markup.goldmark.renderer.unsafe,
    })
    md.add_render_rule('fence', _render_fence)
    if config.enable_emoji:
        md.core.ruler.push('emoji', _emoji_rule)
    return md


def syntax_css(config: SiteConfig) -> str | None:
    """Stylesheet for class-based highlighting; None when styles are inlined."""
    if config.markup.highlight.no_classes:
        return None
    return HtmlFormatter(style=config.markup.highlight.style).get_style_defs('.highlight')


def assign_anchors(tokens: list) -> list[tuple[int, str, str]]:
    """Set a unique id on every heading_open token; return (level, anchor, text) per heading."""
    used: dict[str, int] = {}
    headings = []
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None:
            continue
        text = inline_text(tokens[i + 1]).strip()
        base = slugify(text) or 'heading'
        n = used.get(base, 0)
        anchor = base if n == 0 else f"{base}-{n}"
        used[base] = n + 1
        tok.attrSet('id', anchor)
        headings.append((level, anchor, text))
    return headings


def build_toc(headings: list[tuple[int, str, str]], max_level: int = TOC_MAX_LEVEL) -> list[TocEntry]:
    """Nest headings into a tree rooted at the shallowest level present."""
    entries = [TocEntry(level, anchor, text) for level, anchor, text in headings if level <= max_level]
    roots: list[TocEntry] = []
    stack: list[TocEntry] = []
    for entry in entries:
        while stack and stack[-1].level >= entry.level:
            stack.pop()
        (stack[-1].children if stack else roots).append(entry)
        stack.append(entry)
    return roots


def plain_text(rendered: str) -> str:
    """Strip tags and collapse whitespace."""
    return ' '.join(html.unescape(TAG_RE.sub(' ', rendered)).split())


def reading_time(words: int) -> int:
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def summarize(text: str, words: int = SUMMARY_WORDS) -> str:
    parts = text.split()
    if len(parts) <= words:
        return text
    return ' '.join(parts[:words]) + '…'


def render_document(src: SourceDoc, url: str, config: SiteConfig, md: MarkdownIt, static_dir: Path) -> Document:
    """Expand shortcodes, render Markdown to HTML, and derive TOC, summary, and reading time."""
    expansion = expand_shortcodes(src, url, static_dir, md)
    env = {
        'no_classes': config.markup.highlight.no_classes,
        'style': config.markup.highlight.style,
    }
    tokens = md.parse(expansion.body, env)
    headings = assign_anchors(tokens)
    rendered = expansion.restore(md.renderer.render(tokens, md.options, env))

    text = plain_text(rendered)
    word_count = len(text.split())
    summary = src.frontmatter.summary or summarize(text)
    return Document(
        source=src,
        url=url,
        html=rendered,
        plain_text=text,
        summary=summary,
        word_count=word_count,
        reading_time=reading_time(word_count),
        toc=build_toc(headings),
        assets=expansion.assets,
    )
