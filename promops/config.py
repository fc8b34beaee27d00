"""Configuration management for promops consumers"""
from pathlib import Path
from typing import List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_BUCKETS = ".005,.01,.025,.05,.075,.1,.25,.5,.75,1.0,2.5,5.0,7.5,10.0"


class Config(BaseSettings):
    """Configuration class with Pydantic validation and environment-based settings"""

    model_config = SettingsConfigDict(env_prefix="PROMOPS_", case_sensitive=False)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file path (console only when unset)")

    # Decoding
    strict_decode: bool = Field(default=False, description="Fail a whole batch on one undecodable operation")

    # Replay
    default_help: str = Field(default="Metric replayed from an operations batch", description="Help text for auto-registered metrics")
    histogram_buckets_str: str = Field(default=DEFAULT_BUCKETS, description="Histogram buckets (comma-separated)")

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names from the environment"""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('log_file')
    @classmethod
    def ensure_parent_directories(cls, v):
        """Ensure parent directories exist for file paths"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator('histogram_buckets_str')
    @classmethod
    def validate_histogram_buckets(cls, v):
        """Buckets must be numbers in strictly increasing order"""
        try:
            buckets = [float(item) for item in v.split(',') if item.strip()]
        except ValueError:
            raise ValueError(f"Invalid histogram buckets: {v!r}")
        if not buckets:
            raise ValueError("At least one histogram bucket is required")
        if any(a >= b for a, b in zip(buckets, buckets[1:])):
            raise ValueError("Histogram buckets must be in increasing order")
        return v

    @property
    def histogram_buckets(self) -> List[float]:
        """Get histogram buckets as a list of floats"""
        return [float(item) for item in self.histogram_buckets_str.split(',') if item.strip()]
