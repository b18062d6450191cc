"""In-memory output set and the final write to disk"""

import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from mdsite.core.errors import BuildError, DocumentError
from mdsite.util.log import get_logger


logger = get_logger(__name__)

PRESERVE_RE = re.compile(r'(<(pre|textarea)\b.*?</\2>)', re.DOTALL | re.IGNORECASE)


@dataclass
class SiteOutput:
    """Everything a build produces, held in memory until the whole site has rendered."""
    files:       dict[str, str] = field(default_factory=dict)          # output-relative path -> text
    copies:      dict[str, Path] = field(default_factory=dict)         # output-relative path -> source file
    static_dirs: list[Path] = field(default_factory=list)
    owners:      dict[str, Path] = field(default_factory=dict)

    def add(self, rel: str, content: str, owner: Path | None = None) -> None:
        """Register a generated file; two producers of one path is a build error."""
        if rel in self.files:
            first = self.owners.get(rel) or owner
            if first is not None:
                raise DocumentError(first, f"output {rel} would be written twice")
            raise BuildError(f"Output {rel} would be written twice")
        self.files[rel] = content
        if owner is not None:
            self.owners[rel] = owner

    def copy(self, rel: str, source: Path) -> None:
        self.copies.setdefault(rel, source)

    @property
    def html_pages(self) -> list[str]:
        return [rel for rel in self.files if rel.endswith(".html")]


def minify_markup(text: str) -> str:
    """Drop indentation and blank lines outside <pre> and <textarea> blocks."""
    parts = PRESERVE_RE.split(text)
    out = []
    # split() with two groups yields [text, whole_match, tag_name, text, ...]
    for i in range(0, len(parts), 3):
        chunk = parts[i]
        out.append("\n".join(line.strip() for line in chunk.splitlines() if line.strip()))
        if i + 1 < len(parts):
            out.append(parts[i + 1])
    return "".join(out) + "\n"


def minify_output(output: SiteOutput, xml: bool = True) -> None:
    for rel, content in output.files.items():
        if rel.endswith(".html") or (xml and rel.endswith(".xml")):
            output.files[rel] = minify_markup(content)


def write_site(output: SiteOutput, dest: Path, clean: bool = False) -> int:
    """Write static dirs, copied assets, then generated files under dest. Returns files written."""
    if clean and dest.exists():
        logger.info("cleaning destination", path=str(dest))
        shutil.rmtree(dest)
    dest.mkdir(parents=True, exist_ok=True)

    count = 0
    for static in output.static_dirs:
        if static.is_dir():
            shutil.copytree(static, dest, dirs_exist_ok=True)
            count += sum(1 for p in static.rglob("*") if p.is_file())

    for rel, source in sorted(output.copies.items()):
        target = dest / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
        count += 1

    for rel, content in output.files.items():
        target = dest / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        count += 1
    return count
