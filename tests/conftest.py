"""Root test configuration: a throwaway site root with config, content/, and static/"""

from pathlib import Path
from typing import Any

import pytest
import yaml

from mdsite.config import Settings


BASE_CONFIG: dict[str, Any] = {
    "baseURL": "https://example.com/",
    "title": "Example Blog",
    "theme": "PaperModX",
    "paginate": 10,
    "outputs": {"home": ["HTML", "RSS", "JSON"]},
    "params": {
        "env": "production",
        "showReadingTime": True,
        "showPostNavLinks": True,
        "showBreadCrumbs": True,
        "showCodeCopyButtons": True,
        "comments": True,
    },
    "menu": {"main": [{"name": "Archive", "url": "archive"}, {"name": "Search", "url": "search"}]},
    "markup": {"goldmark": {"renderer": {"unsafe": True}}, "highlight": {"noClasses": False}},
}


class SiteFactory:
    """Writes config.yml and Documents under a tmp site root."""

    def __init__(self, root: Path):
        self.root = root
        self.content = root / "content"
        self.static = root / "static"
        self.content.mkdir(parents=True, exist_ok=True)
        self.write_config()

    def write_config(self, **overrides: Any) -> Path:
        data = {**BASE_CONFIG, **overrides}
        path = self.root / "config.yml"
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    def doc(self, rel: str, body: str = "Some body text.\n", **frontmatter: Any) -> Path:
        path = self.content / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        header = yaml.safe_dump(frontmatter, sort_keys=False)
        path.write_text(f"---\n{header}---\n\n{body}", encoding="utf-8")
        return path

    def raw(self, rel: str, text: str) -> Path:
        path = self.content / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def asset(self, rel: str, data: bytes = b"\x89PNG\r\n") -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def settings(self, **overrides: Any) -> Settings:
        return Settings(source_dir=str(self.root), **overrides)


@pytest.fixture(name="site")
def site_fixture(tmp_path):
    return SiteFactory(tmp_path / "site")
