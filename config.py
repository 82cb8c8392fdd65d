"""
Configuration management using Pydantic Settings for validation and environment handling.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from pathlib import Path


class StorageConfig(BaseSettings):
    """Storage tier capacities."""

    heater_capacity: int = Field(
        default=6,
        ge=0,
        description="Orders the heater can hold"
    )
    cooler_capacity: int = Field(
        default=6,
        ge=0,
        description="Orders the cooler can hold"
    )
    shelf_capacity: int = Field(
        default=12,
        ge=0,
        description="Orders the shelf can hold"
    )

    class Config:
        env_prefix = "KITCHEN_"


class SimulationConfig(BaseSettings):
    """Order placement and pickup schedule of a simulation run."""

    rate_ms: int = Field(
        default=500,
        ge=0,
        description="Milliseconds between two order placements"
    )
    pickup_min_s: float = Field(
        default=4.0,
        ge=0,
        description="Earliest pickup after placement, in seconds"
    )
    pickup_max_s: float = Field(
        default=20.0,
        ge=0,
        description="Latest pickup after placement, in seconds"
    )
    seed: int = Field(
        default=0,
        description="Seed for pickup delays (random if zero)"
    )
    expiry_buffer_ms: int = Field(
        default=50,
        ge=0,
        description="Safety margin kept between a pickup and the order's expiry"
    )

    class Config:
        env_prefix = "SIM_"


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Data paths
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory for exported metrics and solutions"
    )

    # Component configurations
    storage: StorageConfig = Field(default_factory=StorageConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() in ("development", "dev")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() in ("production", "prod")

    @property
    def metrics_dir(self) -> Path:
        return self.data_dir / "metrics"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """Load settings from a YAML file, falling back to the environment."""
    global _settings

    if config_file and Path(config_file).exists():
        import yaml
        with open(config_file) as f:
            config_data = yaml.safe_load(f) or {}

        transformed_data = {}

        # Top-level fields
        for key in ['environment', 'log_level', 'debug', 'data_dir']:
            if key in config_data:
                transformed_data[key] = config_data[key]

        # Nested configurations
        for key in ['storage', 'simulation']:
            if key in config_data:
                transformed_data[key] = config_data[key]

        _settings = Settings(**transformed_data)
    else:
        _settings = Settings()

    return _settings


# Backwards compatibility alias
Config = Settings
