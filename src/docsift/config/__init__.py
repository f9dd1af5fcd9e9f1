"""Configuration for docsift."""

from .config import (
    ClassifierSettings,
    Config,
    DecoderSettings,
    IntakeSettings,
    MonitoringConfig,
    ProviderSettings,
    find_config_file,
)

__all__ = [
    "ClassifierSettings",
    "Config",
    "DecoderSettings",
    "IntakeSettings",
    "MonitoringConfig",
    "ProviderSettings",
    "find_config_file",
]
