"""
Configuration management for docsift using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

MIB = 1024 * 1024

# --- Nested Configuration Models ---


class ClassifierSettings(BaseModel):
    """Thresholds for telling readable prose from leaked document syntax."""

    indicator_threshold: int = Field(
        default=3,
        ge=0,
        description="Text is binary-like when more than this many structural indicators match.",
    )
    binary_ratio_threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Text is binary-like when its control/high-byte character ratio exceeds this.",
    )


class DecoderSettings(BaseModel):
    """Configuration for the multi-encoding fallback decoder."""

    encodings: List[str] = Field(
        default_factory=lambda: ["utf-8", "latin-1", "cp1252"],
        description="Encodings to try, in tie-break preference order.",
    )
    min_candidate_length: int = Field(
        default=50,
        ge=0,
        description="Best candidates of this many characters or fewer are treated as noise.",
    )
    detect_encoding: bool = Field(
        default=True,
        description="Append charset-normalizer's best guess to the encoding list.",
    )

    @field_validator("encodings")
    @classmethod
    def validate_encodings(cls, v: List[str]) -> List[str]:
        """Ensure the list is non-empty and every codec exists."""
        import codecs

        if not v:
            raise ValueError("encodings must contain at least one codec")
        for name in v:
            try:
                codecs.lookup(name)
            except LookupError as e:
                raise ValueError(f"Unknown encoding: {name}") from e
        return v


class ProviderSettings(BaseModel):
    """Configuration for the page text provider."""

    ready_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        description="Maximum wait for the provider to finish initializing.",
    )


class IntakeSettings(BaseModel):
    """Upload rules enforced by the calling layer before extraction."""

    max_upload_bytes: int = Field(default=10 * MIB, gt=0, description="Upload size ceiling in bytes.")
    allowed_media_types: List[str] = Field(
        default_factory=lambda: ["application/pdf", "text/plain"],
        description="Declared media types accepted for extraction.",
    )


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: Optional[str] = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "docsift"
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    decoder: DecoderSettings = Field(default_factory=DecoderSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    intake: IntakeSettings = Field(default_factory=IntakeSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="DOCSIFT_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for name in ("docsift.yaml", "docsift.yml", "config.yaml", "config.yml"):
        path = current_dir / name
        if path.exists():
            return path
    return None

