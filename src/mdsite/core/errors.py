"""Build error hierarchy: every failure that aborts a build derives from BuildError"""

from pathlib import Path


class BuildError(Exception):
    """Base class for fatal build failures."""


class ConfigError(BuildError):
    """The site configuration is unreadable, or has unknown or missing fields."""


class DocumentError(BuildError):
    """A Document could not be parsed or rendered; carries the offending path."""

    def __init__(self, path: Path | str, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class AssetError(DocumentError):
    """A Document references a local asset that does not exist."""

    def __init__(self, path: Path | str, asset: Path | str):
        self.asset = Path(asset)
        super().__init__(path, f"missing asset {self.asset}")
