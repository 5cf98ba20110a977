"""Configuration models using Pydantic for validation."""
from typing import List, Literal, Optional, TextIO
from pydantic import BaseModel, Field, field_validator
from pythonjsonlogger.json import JsonFormatter
import logging
import os

from healthmetrics.series import MetricCategory, Percentile


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"


class FlattenerConfig(BaseModel):
    """Timeseries flattening configuration."""
    latency_family: str = MetricCategory.LATENCY.value
    percentiles: List[Percentile] = Field(
        default_factory=lambda: [Percentile.P50, Percentile.P95, Percentile.P99]
    )

    @field_validator('percentiles')
    @classmethod
    def validate_percentiles(cls, v):
        """Validate the percentile iteration order."""
        if not v:
            raise ValueError("At least one percentile must be defined")

        if len(v) != len(set(v)):
            raise ValueError("Percentiles must be unique")

        return v


class FormatterConfig(BaseModel):
    """Display formatting configuration."""
    placeholder: str = "---"
    request_rate_unit: str = "RPS"
    latency_unit: str = "ms"
    exponential_threshold: float = Field(default=1000, gt=0)
    grouping_threshold: float = Field(default=1000, gt=0)
    success_rate_decimals: int = Field(default=2, ge=0)


class Config(BaseModel):
    """Root configuration model."""
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    flattener: FlattenerConfig = Field(default_factory=FlattenerConfig)
    formatters: FormatterConfig = Field(default_factory=FormatterConfig)

    model_config = {"populate_by_name": True}


def load_config(config_path: str) -> Config:
    """Load and validate configuration from YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(raw_config).__name__}")

    if env_log_level := os.getenv('LOG_LEVEL'):
        global_section = raw_config.get('global') or {}
        if not isinstance(global_section, dict):
            raise ValueError("Configuration section 'global' must be a mapping")
        raw_config['global'] = {**global_section, 'log_level': env_log_level}

    try:
        return Config(**raw_config)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")


def setup_logging(log_level: str, log_format: str = "text", stream: Optional[TextIO] = None):
    """Setup logging configuration on the root logger."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    datefmt = "%Y-%m-%d %H:%M:%S"

    handler = logging.StreamHandler(stream)
    if log_format == "json":
        handler.setFormatter(JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt=datefmt
        ))
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt=datefmt
        ))

    logging.basicConfig(level=level, handlers=[handler], force=True)
