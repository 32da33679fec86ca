"""Configuration models and YAML loader for the ATS hub client."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class GatewayConfig(BaseModel):
    """Where and how the remote data gateway is reached."""

    kind: str = "apex"
    instance_url: str = ""
    api_namespace: str = "ats"
    token_env: str = "ATS_ACCESS_TOKEN"
    timeout_s: float = Field(default=30.0, ge=1.0)

    @field_validator("kind")
    @classmethod
    def kind_normalized(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            msg = "gateway kind must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("instance_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @model_validator(mode="after")
    def apex_needs_instance_url(self) -> "GatewayConfig":
        if self.kind == "apex" and not self.instance_url:
            msg = "instance_url is required for the apex gateway"
            raise ValueError(msg)
        return self


class ViewConfig(BaseModel):
    """Display and interaction tuning for the view controllers."""

    search_debounce_ms: int = Field(default=300, ge=0)
    min_bar_percent: float = Field(default=4.0, ge=0.0, le=100.0)
    max_skill_tags: int = Field(default=5, ge=1)
    setup_reload_delay_s: float = Field(default=3.0, ge=0.0)
    default_source: str = "LinkedIn"

    @property
    def search_debounce_s(self) -> float:
        return self.search_debounce_ms / 1000


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    gateway: GatewayConfig = Field(default_factory=lambda: GatewayConfig(kind="memory"))
    views: ViewConfig = Field(default_factory=ViewConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
