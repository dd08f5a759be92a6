"""Configuration management using Pydantic BaseSettings.

This module provides centralized configuration management with validation,
type safety, and sensible defaults for the agent relay.
"""
from typing import Any, Dict, List
from pydantic import Field, validator
from pydantic_settings import BaseSettings
import json
import re

_REPO_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
_SIGNAL_KEYS = ("name", "source_agent", "target_agent")


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # GitHub (remote channel) configuration
    github_repo: str = Field("asume21/Agent-bridge", env="GITHUB_REPO", description="Repository holding remote flags (owner/name)")
    github_branch: str = Field("main", env="GITHUB_BRANCH", description="Branch to read remote flags from")
    github_token: str = Field("", env="GITHUB_TOKEN", description="Optional GitHub token (raises rate limits, private repos)")
    github_api_url: str = Field("https://api.github.com", env="GITHUB_API_URL", description="GitHub REST API base URL")
    github_remote_dir: str = Field(".handoff", env="GITHUB_REMOTE_DIR", description="Directory of flag files inside the repository")
    github_timeout: int = Field(20, env="GITHUB_TIMEOUT", ge=1, le=120, description="Request timeout in seconds")
    remote_poll_seconds: float = Field(10.0, env="REMOTE_POLL_SECONDS", ge=1.0, le=3600.0, description="Remote poll interval")
    remote_enabled: bool = Field(True, env="REMOTE_ENABLED", description="Poll the remote repository")

    # Local channel configuration
    local_flag_dir: str = Field(".handoff", env="LOCAL_FLAG_DIR", description="Local flag directory (relative to CWD)")
    local_poll_seconds: float = Field(5.0, env="LOCAL_POLL_SECONDS", ge=0.1, le=3600.0, description="Fallback scan interval")
    debounce_ms: int = Field(750, env="DEBOUNCE_MS", ge=0, le=60000, description="Debounce window for change events")

    # Notification configuration
    clipboard_enabled: bool = Field(True, env="CLIPBOARD_ENABLED", description="Copy the prompt to the clipboard")
    toast_enabled: bool = Field(True, env="TOAST_ENABLED", description="Show a desktop notification")
    toast_title: str = Field("Agent Relay", env="TOAST_TITLE", description="Desktop notification title")

    # Signal catalog override (JSON list)
    signals_json: str = Field("", env="SIGNALS_JSON", description="JSON list of {name, source_agent, target_agent}")

    # Logging Configuration
    log_level: str = Field("INFO", env="LOG_LEVEL", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", env="LOG_FORMAT", description="Log format")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @validator('log_level')
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    @validator('github_remote_dir')
    def validate_remote_dir(cls, v):
        return v.strip().strip('/')

    @validator('signals_json')
    def validate_signals(cls, v):
        if v.strip():
            try:
                entries = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f'Invalid JSON in signals_json: {e}')
            if not isinstance(entries, list) or not entries:
                raise ValueError('signals_json must be a non-empty JSON list')
            names = set()
            for entry in entries:
                if not isinstance(entry, dict) or any(
                    not isinstance(entry.get(k), str) or not entry[k].strip() for k in _SIGNAL_KEYS
                ):
                    raise ValueError(f'Each signal needs non-empty string {", ".join(_SIGNAL_KEYS)}: {entry}')
                if entry["name"] in names:
                    raise ValueError(f'Duplicate signal name: {entry["name"]}')
                names.add(entry["name"])
        return v

    def get_signal_entries(self) -> List[Dict[str, Any]]:
        """Parse and return the signal catalog override, empty when unset."""
        if not self.signals_json.strip():
            return []
        return json.loads(self.signals_json)

    def github_owner_repo(self) -> str:
        """Return the normalized ``owner/name`` coordinate."""
        return self.github_repo.strip().strip('/')

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        if self.remote_enabled:
            if not _REPO_PATTERN.match(self.github_owner_repo()):
                issues.append("GITHUB_REPO must look like owner/name")
            if not self.github_branch.strip():
                issues.append("GITHUB_BRANCH is required when REMOTE_ENABLED=true")
            if not self.github_api_url.startswith(("http://", "https://")):
                issues.append("GITHUB_API_URL must be an http(s) URL")

        if not self.local_flag_dir.strip():
            issues.append("LOCAL_FLAG_DIR is required")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from relay.utils.logger import log_info, log_warning

        log_info("Configuration loaded",
                github_repo=self.github_owner_repo(),
                github_branch=self.github_branch,
                github_auth=bool(self.github_token),
                remote_enabled=self.remote_enabled,
                remote_poll_seconds=self.remote_poll_seconds,
                local_flag_dir=self.local_flag_dir,
                local_poll_seconds=self.local_poll_seconds,
                debounce_ms=self.debounce_ms,
                clipboard=self.clipboard_enabled,
                toast=self.toast_enabled,
                log_level=self.log_level)

        if self.debounce_ms / 1000.0 > self.local_poll_seconds:
            log_warning("DEBOUNCE_MS exceeds LOCAL_POLL_SECONDS; the fallback scan will usually fire first")


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
