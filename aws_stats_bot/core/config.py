"""Configuration management for AWS Stats Bot."""

import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from aws_stats_bot.core.exceptions import ConfigurationError


CHART_ENDPOINT_ENV = "CHART_ANGEL_ENDPOINT"


class Config(BaseModel):
    """Configuration model for AWS Stats Bot."""

    default_region: str = Field(default="us-east-1", description="Default AWS region")
    profile_name: Optional[str] = Field(default=None, description="boto3 profile used to build sessions")
    max_border: int = Field(default=30, ge=1, description="Maximum matches rendered with full details")
    chart_endpoint: Optional[str] = Field(default=None, description="Chart service endpoint")
    sqs_metrics: List[str] = Field(default_factory=list, description="SQS metrics to fetch")
    dynamodb_metrics: List[str] = Field(default_factory=list, description="DynamoDB metrics to fetch")
    cost_services: List[str] = Field(default_factory=list, description="Billed services listed in cost reports")
    cost_source: Literal["cloudwatch", "costexplorer"] = Field(default="cloudwatch", description="Cost data source")
    language: Optional[Literal["en", "ja"]] = Field(default=None, description="Report language (AWS_STATS_BOT_LANG when unset)")
    show_metrics: bool = Field(default=True, description="Render a metric summary for single matches")

    purge_use_blacklist: bool = False
    purge_blacklist: List[str] = Field(default_factory=list)
    purge_use_whitelist: bool = False
    purge_whitelist: List[str] = Field(default_factory=list)
    purge_whitelist_patterns: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=datetime.utcnow, description="Configuration creation timestamp")
    version: str = Field(default="1.0.0", description="Configuration version")

    @field_validator('default_region')
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Validate AWS region format."""
        region_pattern = r'^[a-z]{2,3}-[a-z]+-\d+$'
        if not re.match(region_pattern, v):
            raise ValueError(
                f"Invalid AWS region format: {v}. "
                "Expected format: us-east-1, eu-west-1, ap-southeast-3, etc."
            )
        return v

    @field_validator('chart_endpoint')
    @classmethod
    def validate_chart_endpoint(cls, v: Optional[str]) -> Optional[str]:
        """Validate the chart endpoint is an http(s) URL."""
        if v in (None, ""):
            return None
        if not re.match(r'^https?://\S+$', v):
            raise ValueError(f"Invalid chart endpoint: {v}. It must begin with http:// or https://")
        return v

    @field_validator('purge_whitelist_patterns')
    @classmethod
    def validate_patterns(cls, v: List[str]) -> List[str]:
        """Validate that every whitelist pattern compiles."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid whitelist pattern {pattern!r}: {e}")
        return v

    def effective_chart_endpoint(self) -> Optional[str]:
        """Return the configured chart endpoint or the process-wide default."""
        return self.chart_endpoint or os.environ.get(CHART_ENDPOINT_ENV) or None


class ConfigManager:
    """Manages local configuration file for AWS Stats Bot."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_dir: Optional custom configuration directory path.
                       Defaults to ~/.aws-stats-bot/
        """
        if config_dir is None:
            config_dir = Path.home() / ".aws-stats-bot"

        self.config_dir = config_dir
        self.config_file = config_dir / "config.json"

    def load_config(self) -> Optional[Config]:
        """Load configuration from file.

        Returns:
            Config object if file exists and is valid, None otherwise.

        Raises:
            ConfigurationError: If configuration file is corrupted or invalid.
        """
        if not self.config_file.exists():
            return None

        try:
            with open(self.config_file, 'r') as f:
                config_data = json.load(f)

            if isinstance(config_data.get('created_at'), str):
                dt_str = config_data['created_at'].replace('Z', '+00:00')
                config_data['created_at'] = datetime.fromisoformat(dt_str).replace(tzinfo=None)

            return Config(**config_data)

        except (json.JSONDecodeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration file: {e}", details=str(self.config_file))
        except OSError as e:
            raise ConfigurationError(f"Failed to load configuration: {e}", details=str(self.config_file))

    def load_or_default(self) -> Config:
        """Load configuration, falling back to defaults when no file exists."""
        return self.load_config() or Config()

    def save_config(self, config: Config) -> None:
        """Save configuration to file.

        Args:
            config: Configuration object to save.

        Raises:
            OSError: If unable to write configuration file.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        temp_file = self.config_file.with_suffix('.tmp')
        try:
            config_dict = config.model_dump()
            config_dict['created_at'] = config.created_at.isoformat() + 'Z'

            with open(temp_file, 'w') as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)

            # Atomic move
            temp_file.replace(self.config_file)

        except Exception as e:
            if temp_file.exists():
                temp_file.unlink()
            raise OSError(f"Failed to save configuration: {e}")

    def config_exists(self) -> bool:
        """Check if configuration file exists."""
        return self.config_file.exists()

    def get_config_path(self) -> Path:
        """Get the configuration file path."""
        return self.config_file
