"""Configuration management for directory-minifier."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CAPACITY = 300
CHECKSUM_FILENAME = "source-hash.json"


class MinifierConfig(BaseSettings):
    """Settings for a minification run."""

    # Maximum number of files processed at the same time
    capacity: int = Field(
        default=DEFAULT_CAPACITY,
        description="Number of files processed concurrently",
    )
    source_suffix: str = Field(default=".js", description="Suffix of source files")
    output_marker: str = Field(
        default=".min",
        description="Marker inserted before the extension of produced files",
    )
    checksum_filename: str = Field(
        default=CHECKSUM_FILENAME,
        description="Default name of the checksum file inside the root directory",
    )
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="DIRMIN_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def output_suffix(self) -> str:
        """Suffix of produced files, e.g. '.min.js'."""
        return f"{self.output_marker}{self.source_suffix}"

    @field_validator("capacity")
    @classmethod
    def ensure_positive_capacity(cls, v: int) -> int:
        """Capacity must allow at least one file in flight."""
        if v < 1:
            raise ValueError("capacity must be at least 1")
        return v

    @field_validator("source_suffix", "output_marker")
    @classmethod
    def ensure_dotted(cls, v: str) -> str:
        if not v.startswith("."):
            raise ValueError("suffixes must start with '.'")
        return v


def get_config() -> MinifierConfig:
    """Load settings from the environment."""
    return MinifierConfig()
