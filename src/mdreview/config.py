"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDREVIEW_"


class Settings(BaseModel):
    app_name:      str = "mdreview"
    db_url:        str = "sqlite:///mdreview.db"
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    granularity:   str = Field(default="word", pattern="^(word|char)$", description="Token unit for inline diffs")
    break_token:   str = Field(default="<br>", min_length=1, description="Line-break token written inside diff spans")
    max_versions:  int = Field(default=10, ge=0, description="Max stored versions per explanation; 0 disables pruning")
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Root log level for the CLI")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDREVIEW_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
