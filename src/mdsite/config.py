"""Tool settings: settings schema and mdsite.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "mdsite.yaml"


class Settings(BaseModel):
    source_dir:  str  = Field(default=".",          description="Site root holding config, content/, static/, layouts/")
    content_dir: str  = Field(default="content",    description="Documents directory, relative to source_dir")
    static_dir:  str  = Field(default="static",     description="Static files copied verbatim, relative to source_dir")
    config_file: str  = Field(default="config.yml", description="Site configuration document, relative to source_dir")
    output_dir:  str  = Field(default="public",     description="Destination for the generated site, relative to source_dir")
    clean:       bool = Field(default=False,        description="Remove output_dir before writing")
    drafts:      bool = Field(default=False,        description="Force-include drafts regardless of buildDrafts")
    future:      bool = Field(default=False,        description="Force-include future-dated documents")
    verbose:     bool = False

    @property
    def root(self) -> Path:
        return Path(self.source_dir)

    @property
    def content_path(self) -> Path:
        return self.root / self.content_dir

    @property
    def static_path(self) -> Path:
        return self.root / self.static_dir

    @property
    def config_path(self) -> Path:
        return self.root / self.config_file

    @property
    def output_path(self) -> Path:
        return self.root / self.output_dir


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from mdsite.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides.

    mdsite.yaml is read from the site root: source_dir from the overrides or the
    environment, else the current directory.
    """
    cli = {k: v for k, v in (overrides or {}).items() if v is not None}
    env = {}
    for name in Settings.model_fields:
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            env[name] = val

    path = Path(cli.get("source_dir") or env.get("source_dir") or ".") / CONFIG_FILE
    data: dict[str, Any] = {}
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    data.update(env)
    data.update(cli)
    return Settings(**data)
