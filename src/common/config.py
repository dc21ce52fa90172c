"""
Configuration loader for the pantry AI backend.

Loads settings from config.yaml. Environment variables are used ONLY for secrets.
Never log secrets.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field


class RecipeValidationPolicy(str, Enum):
    """How individual recipe entries returned by the generator are validated."""

    LENIENT = "lenient"  # Only the recipes array is checked, every entry is kept
    STRICT = "strict"  # Any malformed entry fails the whole batch
    FILTER = "filter"  # Malformed entries are dropped


class ServiceConfig(BaseModel):
    """Configuration for the generate-text HTTP service."""

    host: str = Field(default="127.0.0.1", description="Host to bind to")
    port: int = Field(default=8000, description="Port to bind to")
    allow_origin: str = Field(default="*", description="Access-Control-Allow-Origin value")
    allow_headers: str = Field(
        default="authorization, x-client-info, apikey, content-type",
        description="Access-Control-Allow-Headers value",
    )


class GenerationConfig(BaseModel):
    """Configuration for reaching the generation service."""

    endpoint_url: str = Field(
        default="http://127.0.0.1:8000/generate-text",
        description="URL of the generate-text endpoint",
    )
    timeout_seconds: float = Field(default=60.0, description="HTTP timeout in seconds")
    default_model: str = Field(default="gpt-4o-mini", description="Model used when none is given")
    default_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    default_max_tokens: int = Field(default=1000, gt=0)
    provider_api_key_env: str = Field(
        default="OPENAI_API_KEY", description="Env var holding the provider API key"
    )
    service_token_env: str = Field(
        default="GENERATION_SERVICE_TOKEN",
        description="Env var holding the bearer token sent to the service",
    )


class ReceiptConfig(BaseModel):
    """Configuration for receipt scanning."""

    model: str = Field(default="gpt-4o-mini", description="Vision-capable model")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Low for extraction")
    max_tokens: int = Field(default=1500, gt=0)
    assume_refrigerated: bool = Field(
        default=True, description="Storage assumed when predicting expiration"
    )


class RecipeConfig(BaseModel):
    """Configuration for recipe suggestions."""

    model: str = Field(default="gpt-4o-mini")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=3000, gt=0)
    recipe_count: int = Field(default=5, gt=0, description="Recipes requested per call")
    validation_policy: RecipeValidationPolicy = Field(
        default=RecipeValidationPolicy.LENIENT,
        description="Per-recipe validation policy (lenient|strict|filter)",
    )


class Config(BaseModel):
    """Main configuration object."""

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    receipt: ReceiptConfig = Field(default_factory=ReceiptConfig)
    recipes: RecipeConfig = Field(default_factory=RecipeConfig)
    log_level: str = Field(default="INFO", description="Logging level")
    enable_pretty_print: bool = Field(
        default=False, description="Enable custom pretty print for debugging"
    )
    save_to_file: bool = Field(default=False, description="Save logs to file")
    log_file_path: str = Field(default="server.log", description="Log file path (relative to root)")
    max_log_file_size: int = Field(
        default=10485760, description="Max log file size in bytes (10MB)"
    )
    backup_count: int = Field(default=5, description="Number of backup log files to keep")


_LOGGING_KEYS = (
    "enable_pretty_print",
    "save_to_file",
    "log_file_path",
    "max_log_file_size",
    "backup_count",
)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML file.

    Environment variables are used ONLY for secrets (API keys), not configuration.

    Args:
        config_path: Path to config.yaml file. Defaults to ./config.yaml

    Returns:
        Loaded configuration object
    """
    if config_path is None:
        config_path = Path("config.yaml")

    config_data: Dict[str, Any] = {}

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    # Handle nested logging configuration
    if "logging" in config_data:
        logging_config = config_data.pop("logging") or {}
        if "level" in logging_config:
            config_data["log_level"] = logging_config["level"]
        for key in _LOGGING_KEYS:
            if key in logging_config:
                config_data[key] = logging_config[key]

    return Config(**config_data)
