"""CLI command implementations"""

from datetime import date, datetime, timezone
from pathlib import Path
from typing import Annotated, Optional

import typer
import yaml

from mdsite.config import Settings, load_config
from mdsite.core.collect import sort_documents
from mdsite.core.errors import BuildError
from mdsite.core.pipeline import load_documents, run_build
from mdsite.core.siteconfig import load_site_config
from mdsite.util.log import configure_logging


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _flag(value: bool) -> Optional[bool]:
    """Only an explicitly set flag overrides mdsite.yaml / env settings."""
    return True if value else None


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling, then configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    configure_logging(verbose=settings.verbose)
    return settings


def build_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Site root (config, content/, static/)")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", "-o", help="Output directory")] = None,
    config: Annotated[Optional[str], typer.Option("--config", help="Site configuration file")] = None,
    clean: Annotated[bool, typer.Option("--clean", help="Remove the output directory first")] = False,
    drafts: Annotated[bool, typer.Option("--drafts", "-D", help="Include drafts")] = False,
    future: Annotated[bool, typer.Option("--future", "-F", help="Include future-dated documents")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    ):
    """Render every Document and write the static site."""
    settings = _settings(overrides={
        "source_dir": source, "output_dir": out, "config_file": config,
        "clean": _flag(clean), "drafts": _flag(drafts), "future": _flag(future), "verbose": _flag(verbose),
    })
    try:
        report = run_build(settings)
    except BuildError as e:
        _fail(str(e))
    except OSError as e:
        _fail("Writing the site failed", e)
    typer.echo(
        f"Built {report.documents} document(s): "
        f"{report.pages} page(s), {report.files} file(s) in {report.output_dir}/"
    )


def list_cmd(
    source: Annotated[Optional[str], typer.Argument(help="Site root")] = None,
    drafts: Annotated[bool, typer.Option("--drafts", "-D", help="Include drafts")] = False,
    future: Annotated[bool, typer.Option("--future", "-F", help="Include future-dated documents")] = False,
    ):
    """List published Documents in feed order (newest first)."""
    settings = _settings(overrides={"source_dir": source, "drafts": _flag(drafts), "future": _flag(future)})
    try:
        site = load_site_config(settings.config_path)
        docs = sort_documents(load_documents(settings, site, datetime.now(timezone.utc)))
    except BuildError as e:
        _fail(str(e))
    if not docs:
        typer.echo("No published documents found.")
        raise typer.Exit(1)
    for doc in docs:
        marker = " [draft]" if doc.frontmatter.draft else ""
        typer.echo(f"{doc.date.date().isoformat()}  {doc.rel_path}  {doc.frontmatter.title}{marker}")


def new_cmd(
    path: Annotated[str, typer.Argument(help="Document path under the content dir, e.g. posts/hello.md")],
    title: Annotated[Optional[str], typer.Option("--title", help="Document title")] = None,
    source: Annotated[Optional[str], typer.Option("--source", help="Site root")] = None,
    ):
    """Create a draft Document skeleton."""
    settings = _settings(overrides={"source_dir": source})
    target = settings.content_path / path
    if target.suffix.lower() != ".md":
        target = target / "index.md"
    if target.exists():
        _fail(f"{target} already exists")

    slug = target.parent.name if target.name == "index.md" else target.stem
    header = {
        "title": title or slug.replace("-", " ").replace("_", " ").title(),
        "date": date.today(),
        "draft": True,
        "summary": "",
        "tags": [],
    }
    target.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(header, default_flow_style=False, allow_unicode=True, sort_keys=False)
    target.write_text(f"---\n{text}---\n\n", encoding="utf-8")
    typer.echo(f"Created {target}")
