"""Centralized configuration for the intake processor.

The intake rule list is built once at process start, either from a YAML file
or from the ``BUCKET_CONFIG`` JSON environment variable used by the deployed
Lambda, and then passed explicitly to the gateway and engine.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from filedrop.utils.result import ConfigError, Err, Ok, Result

PROCESSOR_VERSION = "1.0.0"

BUCKET_CONFIG_ENV = "BUCKET_CONFIG"

MAX_PARALLELISM = 64


@dataclass(frozen=True)
class PathRule:
    """
    A configured intake path.

    Attributes:
        intake_path: Key prefix without trailing slash (e.g. "person-full")
        normal_retention_days: Lifetime of processed objects
        error_retention_days: Lifetime of quarantined objects, if different
        downstream_target: Opaque handle of the consumer (a Lambda ARN)
    """

    intake_path: str
    normal_retention_days: int
    downstream_target: str
    error_retention_days: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "intake_path": self.intake_path,
            "normal_retention_days": self.normal_retention_days,
            "error_retention_days": self.error_retention_days,
            "downstream_target": self.downstream_target,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PathRule":
        """Create from dictionary, accepting the camelCase deployment keys."""
        error_days = data.get("error_retention_days", data.get("errorObjectLifetimeDays"))
        return cls(
            intake_path=str(data.get("intake_path", data.get("path", ""))),
            normal_retention_days=int(
                data.get("normal_retention_days", data.get("objectLifetimeDays", 0))
            ),
            downstream_target=str(
                data.get("downstream_target", data.get("subscriberLambdaArn", ""))
            ),
            error_retention_days=int(error_days) if error_days is not None else None,
        )


@dataclass(frozen=True)
class IntakeConfiguration:
    """Ordered intake rules for one bucket. Order decides matching."""

    name: str = ""
    rules: tuple[PathRule, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "rules": [rule.to_dict() for rule in self.rules],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IntakeConfiguration":
        """Create from dictionary."""
        rules_data = data.get("rules", data.get("subdirectories", [])) or []
        return cls(
            name=str(data.get("name") or ""),
            rules=tuple(PathRule.from_dict(rule) for rule in rules_data),
        )

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate the rule list.

        Returns:
            Result indicating success or validation error
        """
        seen: set[str] = set()

        for idx, rule in enumerate(self.rules):
            prefix = f"rules[{idx}]"

            if not rule.intake_path:
                return Err(ConfigError(
                    field=f"{prefix}.intake_path",
                    message="Must not be empty",
                ))
            if rule.intake_path.startswith("/") or rule.intake_path.endswith("/"):
                return Err(ConfigError(
                    field=f"{prefix}.intake_path",
                    message=f"Must not start or end with '/', got {rule.intake_path!r}",
                ))
            if rule.intake_path in seen:
                return Err(ConfigError(
                    field=f"{prefix}.intake_path",
                    message=f"Duplicate intake path {rule.intake_path!r}",
                ))
            seen.add(rule.intake_path)

            if rule.normal_retention_days < 1:
                return Err(ConfigError(
                    field=f"{prefix}.normal_retention_days",
                    message=f"Must be at least 1, got {rule.normal_retention_days}",
                ))
            if rule.error_retention_days is not None and rule.error_retention_days < 1:
                return Err(ConfigError(
                    field=f"{prefix}.error_retention_days",
                    message=f"Must be at least 1, got {rule.error_retention_days}",
                ))
            if not rule.downstream_target:
                return Err(ConfigError(
                    field=f"{prefix}.downstream_target",
                    message="Must not be empty",
                ))

        return Ok(None)


@dataclass
class AwsConfig:
    """AWS client settings."""

    region: Optional[str] = None
    endpoint_url: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class FileDropConfig:
    """
    Complete processor configuration.

    This is the single source of truth for the intake rules and the
    settings of the adapters around the engine.
    """

    bucket: IntakeConfiguration = field(default_factory=IntakeConfiguration)
    aws: AwsConfig = field(default_factory=AwsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    parallelism: int = 4
    processor_version: str = PROCESSOR_VERSION

    @classmethod
    def from_yaml(cls, path: Path) -> Result["FileDropConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["FileDropConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        if not isinstance(data, dict):
            return Err(ConfigError(
                field="root",
                message=f"Expected a mapping, got {type(data).__name__}",
            ))

        try:
            bucket = IntakeConfiguration.from_dict(data.get("bucket", {}) or {})

            aws_data = data.get("aws", {}) or {}
            aws = AwsConfig(
                region=aws_data.get("region"),
                endpoint_url=aws_data.get("endpoint_url"),
            )

            logging_data = data.get("logging", {}) or {}
            logging_config = LoggingConfig(
                level=logging_data.get("level", "info"),
                format=logging_data.get("format", "json"),
            )

            config = cls(
                bucket=bucket,
                aws=aws,
                logging=logging_config,
                parallelism=int(data.get("parallelism", 4)),
                processor_version=str(data.get("processor_version", PROCESSOR_VERSION)),
            )

            return Ok(config)

        except (TypeError, ValueError, AttributeError) as e:
            return Err(ConfigError(
                field="unknown",
                message=f"Failed to parse configuration: {e}",
            ))

    @classmethod
    def from_bucket_json(cls, raw: str) -> Result["FileDropConfig", ConfigError]:
        """
        Build configuration from the deployment's BUCKET_CONFIG JSON.

        Args:
            raw: JSON document with ``name`` and ``subdirectories``

        Returns:
            Result with loaded config or error
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            return Err(ConfigError(
                field=BUCKET_CONFIG_ENV,
                message=f"Invalid JSON: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field=BUCKET_CONFIG_ENV,
                message="Expected a JSON object",
            ))

        return cls.from_dict({"bucket": data})

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        if self.parallelism < 1 or self.parallelism > MAX_PARALLELISM:
            return Err(ConfigError(
                field="parallelism",
                message=f"Must be between 1 and {MAX_PARALLELISM}, got {self.parallelism}",
            ))

        if self.logging.format not in ("json", "text"):
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be 'json' or 'text', got {self.logging.format!r}",
            ))

        return self.bucket.validate()


def load_config(path: Optional[Path] = None) -> Result[FileDropConfig, ConfigError]:
    """
    Load configuration from the standard locations.

    A YAML file wins when given. Otherwise the BUCKET_CONFIG environment
    variable is used, and an empty rule list when neither is present.
    Environment overrides for logging and AWS settings are applied last.

    Args:
        path: Optional path to a YAML configuration file

    Returns:
        Result with loaded config or error
    """
    if path is not None:
        result = FileDropConfig.from_yaml(path)
    elif os.environ.get(BUCKET_CONFIG_ENV):
        result = FileDropConfig.from_bucket_json(os.environ[BUCKET_CONFIG_ENV])
    else:
        result = Ok(FileDropConfig())

    if result.is_err():
        return result
    config = result.unwrap()

    if os.environ.get("FILEDROP_LOG_LEVEL"):
        config.logging.level = os.environ["FILEDROP_LOG_LEVEL"]
    if os.environ.get("AWS_REGION"):
        config.aws.region = os.environ["AWS_REGION"]
    if os.environ.get("AWS_ENDPOINT_URL"):
        config.aws.endpoint_url = os.environ["AWS_ENDPOINT_URL"]

    validation_result = config.validate()
    if validation_result.is_err():
        return Err(validation_result.unwrap_err())

    return Ok(config)
