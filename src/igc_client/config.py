"""
Client configuration loader (connection, session and paging settings).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "igc_client.yml"


class SessionConfig(BaseModel):
    user: Optional[str] = None
    password_env: str = "IGC_PASSWORD"
    timeout_seconds: Optional[float] = Field(default=None, gt=0)

    def resolve_password(self) -> Optional[str]:
        return os.getenv(self.password_env)


class PagingConfig(BaseModel):
    default_page_size: int = Field(default=100, ge=1, le=10000)


class IGCClientConfig(BaseModel):
    base_url: str
    session: SessionConfig = Field(default_factory=SessionConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)
    generate_models: bool = True
    open_session: bool = True

    @field_validator("base_url")
    @classmethod
    def _require_https(cls, value: str) -> str:
        if not value.startswith("https://"):
            raise ValueError(f"base_url must be https: {value}")
        return value.rstrip("/")


def load_client_config(config_path: Optional[Union[str, Path]] = None) -> IGCClientConfig:
    """
    Load and validate client configuration from a YAML file

    Args:
        config_path: Path to config file. Defaults to config/igc_client.yml
            under the current working directory

    Returns:
        Validated IGCClientConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"IGC client config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = IGCClientConfig(**data)
        logger.info("Successfully loaded IGC client config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("IGC client config validation failed: %s", e)
        raise


def config_from_env() -> IGCClientConfig:
    """Build the configuration from IGC_* environment variables (a .env file is honoured)."""
    load_dotenv()
    data = {
        "base_url": os.getenv("IGC_BASE_URL", ""),
        "session": {"user": os.getenv("IGC_USER")},
    }
    timeout = os.getenv("IGC_TIMEOUT")
    if timeout:
        data["session"]["timeout_seconds"] = timeout
    page_size = os.getenv("IGC_PAGE_SIZE")
    if page_size:
        data["paging"] = {"default_page_size": page_size}
    try:
        return IGCClientConfig(**data)
    except ValidationError as e:
        logger.error("IGC client environment configuration is invalid: %s", e)
        raise
