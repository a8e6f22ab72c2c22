"""
NanoDB Configuration Settings

This module contains all configuration constants for the NanoDB server.
Values can be overridden through environment variables and, at startup,
through command line flags (see nanodb.server).
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("NANODB_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("NANODB_PORT", "7878"))

    # Authentication (empty means unset; the server refuses to start)
    AUTH_TOKEN: str = os.environ.get("AUTH_TOKEN", "")

    # Expiration settings
    SWEEP_INTERVAL: float = float(os.environ.get("NANODB_SWEEP_INTERVAL", "1.0"))

    # Connection settings
    READ_BUFFER_SIZE: int = 512

    # Logging settings
    DEBUG: bool = os.environ.get("NANODB_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("NANODB_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
