"""Configuration module for filedrop."""

from filedrop.config.settings import (
    FileDropConfig,
    IntakeConfiguration,
    PathRule,
    load_config,
)

__all__ = ["FileDropConfig", "IntakeConfiguration", "PathRule", "load_config"]
