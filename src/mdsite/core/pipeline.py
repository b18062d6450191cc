"""Build orchestration: Documents + site configuration + theme -> static output set"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from mdsite.config import Settings
from mdsite.core.collect import (
    Pager,
    filter_published,
    group_archive,
    group_by_tag,
    link_neighbours,
    paginate,
    sort_documents,
)
from mdsite.core.errors import DocumentError
from mdsite.core.feeds import build_json_index, build_robots, build_rss, build_sitemap
from mdsite.core.models import Document, SourceDoc, url_to_output_path
from mdsite.core.output import SiteOutput, minify_output, write_site
from mdsite.core.parse import MD_EXTENSIONS, parse_dir, permalink
from mdsite.core.render import make_parser, render_document, syntax_css
from mdsite.core.shortcodes import is_remote, resolve_asset
from mdsite.core.siteconfig import SiteConfig, load_site_config
from mdsite.core.theme import Theme, load_theme, render_template
from mdsite.util.log import get_logger


logger = get_logger(__name__)


@dataclass
class BuildReport:
    documents:  int
    pages:      int
    files:      int
    output_dir: Path


def load_documents(settings: Settings, config: SiteConfig, now: datetime) -> list[SourceDoc]:
    """Parse every Document under the content dir and keep the published ones."""
    sources = parse_dir(settings.content_path)
    published = filter_published(sources, config, now, drafts=settings.drafts, future=settings.future)
    logger.debug("documents loaded", total=len(sources), published=len(published))
    return published


def _assign_urls(sources: list[SourceDoc]) -> dict[str, SourceDoc]:
    """Permalink -> Document; two Documents on one permalink is an error naming both."""
    by_url: dict[str, SourceDoc] = {}
    for src in sources:
        url = permalink(src)
        if url in by_url:
            raise DocumentError(src.path, f"permalink {url} already used by {by_url[url].path}")
        by_url[url] = src
    return by_url


def _bundle_resources(doc: Document) -> list[tuple[Path, str]]:
    """Non-Markdown files living beside a page bundle's index.md."""
    if not doc.source.is_bundle:
        return []
    bundle = doc.source.path.parent
    base = doc.url.strip("/")
    return [
        (p, f"{base}/{p.relative_to(bundle).as_posix()}")
        for p in sorted(bundle.rglob("*"))
        if p.is_file() and p.suffix.lower() not in MD_EXTENSIONS
    ]


def cover_url(doc: Document, config: SiteConfig, static_dir: Path, output: SiteOutput) -> str | None:
    """Absolute URL of a Document's cover image, verifying local files exist."""
    cover = doc.fm.cover
    if cover is None or not cover.image:
        return None
    if is_remote(cover.image):
        return cover.image
    path, dest = resolve_asset(doc.source, cover.image, doc.url, static_dir)
    if dest is None:
        return config.abs_url(cover.image)
    output.copy(dest, path)
    return config.abs_url(dest)


def cover_visible(doc: Document, config: SiteConfig, single: bool) -> bool:
    cover = doc.fm.cover
    if cover is None:
        return False
    if cover.hidden is not None:
        return not cover.hidden
    params = config.params.cover
    if params.hidden:
        return False
    return not (params.hidden_in_single if single else params.hidden_in_list)


def breadcrumbs(doc: Document) -> list[tuple[str, str]]:
    """(name, url) trail from Home to the Document's section."""
    crumbs = [("Home", "/")]
    if doc.source.section:
        crumbs.append((doc.source.section.title(), f"/{doc.url.strip('/').split('/')[0]}/"))
    return crumbs


def _single_context(doc: Document, config: SiteConfig, covers: dict[str, str | None]) -> dict:
    fm, params = doc.fm, config.params
    return {
        "page": doc,
        "canonical": config.abs_url(doc.url),
        "show_toc": bool(doc.toc) and (fm.show_toc if fm.show_toc is not None else params.show_toc),
        "toc_open": fm.toc_open if fm.toc_open is not None else params.toc_open,
        "toc_side": fm.toc_side,
        "cover": covers[doc.url] if cover_visible(doc, config, single=True) else None,
        "show_comments": params.comments and fm.comments is not False,
        "breadcrumbs": breadcrumbs(doc),
    }


def _render_listing(
    theme: Theme,
    output: SiteOutput,
    template: str,
    pagers: list[Pager],
    config: SiteConfig,
    covers: dict[str, str | None],
    **context,
    ) -> None:
    for pager in pagers:
        output.add(url_to_output_path(pager.url), render_template(
            theme, template,
            pager=pager,
            canonical=config.abs_url(pager.url),
            covers={d.url: covers[d.url] for d in pager.items if cover_visible(d, config, single=False)},
            **context,
        ))


def build_site(settings: Settings, now: datetime | None = None) -> tuple[SiteOutput, list[Document]]:
    """Render the complete site in memory. Raises on the first error; writes nothing."""
    now = now or datetime.now(timezone.utc)
    config = load_site_config(settings.config_path)
    if config.inline_shortcodes:
        logger.warning("enableInlineShortcodes is accepted but inline shortcodes are not supported")
    sources = load_documents(settings, config, now)
    md = make_parser(config)
    theme = load_theme(settings.root, config)
    static_dir = settings.static_path

    output = SiteOutput(static_dirs=[*theme.static_dirs, static_dir])

    docs = [
        render_document(src, url, config, md, static_dir)
        for url, src in _assign_urls(sources).items()
    ]
    docs = sort_documents(docs)
    link_neighbours(docs)
    covers = {d.url: cover_url(d, config, static_dir, output) for d in docs}

    for doc in docs:
        layout = f"{doc.fm.layout}.html" if doc.fm.layout else "single.html"
        output.add(doc.output_path, render_template(theme, layout, **_single_context(doc, config, covers)),
                   owner=doc.source.path)
        for source, rel in [*_bundle_resources(doc), *doc.assets]:
            output.copy(rel, source)

    home_info = config.params.home_info
    _render_listing(
        theme, output, "list.html", paginate(docs, config.paginate, "/"), config, covers,
        title=config.title, kind="home",
        home_info=home_info,
        home_info_html=md.render(home_info.content) if home_info else "",
    )

    sections: dict[str, list[Document]] = {}
    for doc in docs:
        if doc.source.section:
            sections.setdefault(doc.url.strip("/").split("/")[0], []).append(doc)
    for name, members in sections.items():
        _render_listing(
            theme, output, "list.html", paginate(members, config.paginate, f"/{name}/"), config, covers,
            title=name.title(), kind="section", home_info=None, home_info_html="",
        )

    output.add("archive/index.html", render_template(
        theme, "archive.html", years=group_archive(docs), canonical=config.abs_url("/archive/"),
    ))

    if config.has_output("JSON"):
        output.add("search/index.html", render_template(
            theme, "search.html", canonical=config.abs_url("/search/"),
        ))

    terms = group_by_tag(docs)
    output.add("tags/index.html", render_template(
        theme, "terms.html", terms=terms, canonical=config.abs_url("/tags/"),
    ))
    for term in terms:
        _render_listing(
            theme, output, "term.html", paginate(term.docs, config.paginate, term.url), config, covers,
            term=term,
        )

    output.add("404.html", render_template(theme, "404.html", canonical=config.abs_url("/404.html")))

    if css := syntax_css(config):
        output.add("assets/syntax.css", css)
    if config.has_output("RSS"):
        output.add("index.xml", build_rss(docs, config))
    if config.has_output("JSON"):
        output.add("index.json", build_json_index(docs, config))

    newest = docs[0].date if docs else None
    sitemap = [("/", newest)] + [(d.url, d.date) for d in docs]
    sitemap += [(f"/{name}/", members[0].date) for name, members in sections.items()]
    sitemap += [(t.url, t.docs[0].date) for t in terms]
    output.add("sitemap.xml", build_sitemap(sitemap, config))
    if config.robots_txt:
        output.add("robots.txt", build_robots(config))

    if config.minify.minify_output:
        minify_output(output, xml=not config.minify.disable_xml)
    return output, docs


def run_build(settings: Settings, now: datetime | None = None) -> BuildReport:
    """build_site, then write the result to settings.output_dir."""
    output, docs = build_site(settings, now)
    dest = settings.output_path
    files = write_site(output, dest, clean=settings.clean)
    logger.info("site written", output_dir=str(dest), documents=len(docs), files=files)
    return BuildReport(documents=len(docs), pages=len(output.html_pages), files=files, output_dir=dest)
