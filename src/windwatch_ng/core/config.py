"""
Configuration management for WindWatch-NG.
"""

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from ruamel.yaml import YAML


class NWSApiConfig(BaseModel):
    """NWS API configuration."""

    base_url: str = Field("https://api.weather.gov", description="NWS API base URL")
    timeout: float = Field(30, description="Per-request timeout in seconds")
    user_agent: str = Field("WindWatch-NG", description="User agent for API requests")
    area: str = Field("CA", description="State/area code for the active alerts feed")
    max_concurrent_requests: int = Field(
        10, ge=1, description="Maximum number of in-flight requests to the NWS API"
    )


class FilteringConfig(BaseModel):
    """Alert and station filtering configuration."""

    event_keywords: List[str] = Field(
        default_factory=lambda: ["wind"],
        description="Alert events containing any of these (case-insensitive) are selected",
    )
    wind_threshold_mph: float = Field(
        15.0, ge=0, description="Minimum station wind speed (mph) for a station to qualify"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    file: Optional[Path] = Field(None, description="Log file path")
    format: str = Field("json", description="Log format: 'json' or 'text'")


class DatabaseConfig(BaseModel):
    """Database configuration."""

    enabled: bool = Field(True, description="Enable database storage")
    url: Optional[str] = Field(None, description="Database URL (defaults to SQLite)")


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
        case_sensitive=False,
    )

    # Application settings
    enabled: bool = Field(True, description="Enable WindWatch-NG")
    data_dir: Path = Field(Path("/var/lib/windwatch-ng/data"), description="Data directory")
    poll_interval: int = Field(300, ge=1, description="Poll interval in seconds")

    # Component configurations
    nws: NWSApiConfig = Field(default_factory=NWSApiConfig)
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @classmethod
    def from_yaml(cls, config_path = None) -> "AppConfig":
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = Path("config/default.yaml")
        elif isinstance(config_path, str):
            config_path = Path(config_path)

        if not config_path.exists():
            # Return default config if file doesn't exist
            return cls()

        yaml = YAML(typ='safe')
        with open(config_path, 'r') as f:
            yaml_data = yaml.load(f)

        return cls(**(yaml_data or {}))
