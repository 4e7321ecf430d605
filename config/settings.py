"""
Configuration settings for devprovision.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from devprovision.models import Platform, PollPolicy


class PollingConfig(BaseModel):
    """Readiness polling configuration."""
    default: Optional[PollPolicy] = Field(
        default=None,
        description="Poll policy for every tool, replacing the built-in policies"
    )
    overrides: Dict[str, PollPolicy] = Field(
        default_factory=dict,
        description="Poll policy per tool name, taking precedence over the default"
    )

    def policies_for(self, names: Iterable[str]) -> Dict[str, PollPolicy]:
        """Policy overrides to hand to the orchestrator for the given tools."""
        policies = {name: self.default for name in names} if self.default else {}
        policies.update(self.overrides)
        return policies


class ExecutionConfig(BaseModel):
    """Probe, action and command execution limits."""
    probe_timeout: float = Field(default=10.0, gt=0, description="Seconds allowed for a single probe")
    action_timeout: float = Field(default=1800.0, gt=0, description="Seconds allowed for an install or start action")
    command_timeout: float = Field(default=600.0, gt=0, description="Default seconds allowed for one command")
    download_timeout: float = Field(default=60.0, gt=0, description="Seconds allowed for one HTTP request")
    use_sudo: bool = Field(default=True, description="Prefix privileged commands with sudo when not root")


class ArtifactConfig(BaseModel):
    """Run report storage configuration."""
    base_path: Path = Field(default=Path("artifacts"), description="Base path for saved reports")
    save_reports: bool = Field(default=False, description="Save every run report as JSON")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    format: Optional[str] = Field(default=None, description="Log format, None for the built-in format")
    file_path: Optional[Path] = Field(default=Path("logs/devprovision.log"))
    max_file_size_mb: int = Field(default=10, ge=1, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, ge=0, description="Number of log backups to keep")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown logging level: {v}")
        return level


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_prefix="DEVPROVISION_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    polling: PollingConfig = Field(default_factory=PollingConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    artifacts: ArtifactConfig = Field(default_factory=ArtifactConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    platform: Optional[Platform] = Field(default=None, description="Override platform detection")
