"""
Configuration Management Module

This module handles client configuration loading from environment variables
and the .env file. It uses pydantic-settings for validation and type safety.
"""

from typing import List, Optional
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class BinanceConfig(BaseSettings):
    """
    Connection and credential settings for the Binance REST API.

    Loaded from BINANCE_* environment variables, e.g. BINANCE_API_KEY.
    """

    scheme: str = Field(default="https", description="http or https")
    host: str = Field(default="api.binance.com")
    port: int = Field(default=443)
    info_url: str = Field(
        default="/api/v3/exchangeInfo",
        description="Path of the endpoint publishing the rate limits"
    )
    api_key: str = Field(default="")
    api_secret: str = Field(default="")
    recv_window: int = Field(
        default=5000,
        description="Milliseconds a signed request stays valid after its timestamp"
    )
    request_timeout: float = Field(default=30.0, gt=0, description="Timeout in seconds")

    model_config = SettingsConfigDict(
        env_prefix="BINANCE_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator('scheme')
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        v = v.lower()
        if v not in ("http", "https"):
            raise ValueError("Scheme must be http or https")
        return v

    @field_validator('port')
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator('recv_window')
    @classmethod
    def validate_recv_window(cls, v: int) -> int:
        """Binance accepts at most 60000ms"""
        if v < 1 or v > 60000:
            raise ValueError("recv_window must be between 1 and 60000")
        return v

    @property
    def base_url(self) -> str:
        default_port = 443 if self.scheme == "https" else 80
        if self.port == default_port:
            return f"{self.scheme}://{self.host}"
        return f"{self.scheme}://{self.host}:{self.port}"

    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.api_secret)


class Config(BaseSettings):
    """
    Main configuration class.

    Loads configuration from environment variables and .env file.
    API keys should be stored in environment variables.

    Usage:
        config = Config()
        binance = config.get_binance_config()
    """

    # Environment
    environment: str = Field(default="dev", description="dev/test/prod")

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)
    timezone: str = Field(default="UTC", description="e.g. Europe/London, Asia/Tokyo")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    def get_binance_config(self) -> BinanceConfig:
        """
        Get the Binance connection settings.

        Returns:
            BinanceConfig object
        """
        return BinanceConfig()

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == "prod"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == "dev"

    def is_test(self) -> bool:
        """Check if running in test environment"""
        return self.environment == "test"

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return list of warnings.

        Returns:
            List of warning messages
        """
        warnings = []
        binance = self.get_binance_config()

        if not binance.has_credentials():
            warnings.append("Binance API key/secret not set, signed endpoints will fail")

        if binance.scheme == "http" and self.is_production():
            warnings.append("Production environment is using plain http")

        if binance.recv_window > 10000:
            warnings.append(
                f"recv_window={binance.recv_window}ms is large, consider <= 10000"
            )

        if self.is_production() and self.log_level == "DEBUG":
            warnings.append("DEBUG logging enabled in production")

        return warnings


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance (singleton pattern).

    Returns:
        Config object
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """
    Reload configuration from environment.

    Returns:
        New Config object
    """
    global _config
    _config = Config()
    return _config
