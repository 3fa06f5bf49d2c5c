"""Configuration management for Folio CRM.

Loads configuration from environment variables and .env file.
Provides validation and sensible defaults.

Usage:
    from folio.core.config import get_config, validate_config

    config = get_config()
    issues = validate_config(config)
    if issues:
        for issue in issues:
            print(f"Config issue: {issue}")
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from folio.core.exceptions import ConfigurationError


@dataclass
class Config:
    """Application configuration.

    Attributes:
        db_path: Path to SQLite database file
        log_path: Directory for log files
        stale_warning_days: Days without contact before a lead is "warning"
        stale_critical_days: Days without contact before a lead is "critical"
        stale_dead_days: Days without contact before a lead is "dead"
        nudge_limit: Maximum number of nudges returned
        openai_api_key: OpenAI key (live scoring flag only)
        anthropic_api_key: Anthropic key (live scoring flag only)
        debug: Enable debug mode
    """

    db_path: Path = field(default_factory=lambda: Path.home() / ".folio" / "folio.db")
    log_path: Path = field(default_factory=lambda: Path.home() / ".folio" / "logs")

    stale_warning_days: int = 14
    stale_critical_days: int = 21
    stale_dead_days: int = 30
    nudge_limit: int = 5

    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    debug: bool = False

    @property
    def ai_available(self) -> bool:
        """Whether any LLM credential is configured."""
        return bool(self.openai_api_key or self.anthropic_api_key)


_QUOTES = ('"', "'")
_TRUTHY = frozenset({"true", "1", "yes", "on"})


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def load_env_file(path: Path) -> dict[str, str]:
    """Read KEY=VALUE pairs from a .env file.

    Blank lines, ``#`` comments and lines without ``=`` are skipped.
    Matching single or double quotes around a value are removed. A
    missing file yields an empty dict.
    """
    if not path.exists():
        return {}

    env_vars: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        if key.strip():
            env_vars[key.strip()] = _unquote(value.strip())
    return env_vars


def _lookup(key: str, env_vars: dict[str, str]) -> Optional[str]:
    """Process environment first, then .env. Empty strings count as unset."""
    value = os.environ.get(key) or env_vars.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_path(key: str, default: Path, env_vars: dict[str, str]) -> Path:
    value = _lookup(key, env_vars)
    return Path(value).expanduser().resolve() if value else default


def _get_str(key: str, env_vars: dict[str, str]) -> Optional[str]:
    return _lookup(key, env_vars)


def _get_bool(key: str, default: bool, env_vars: dict[str, str]) -> bool:
    value = _lookup(key, env_vars)
    return default if value is None else value.lower() in _TRUTHY


def _get_int(key: str, default: int, env_vars: dict[str, str]) -> int:
    """Integer setting.

    Raises:
        ConfigurationError: If the value is not an integer
    """
    value = _lookup(key, env_vars)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e


DEFAULT_DB_PATH = Path.home() / ".folio" / "folio.db"
DEFAULT_LOG_PATH = Path.home() / ".folio" / "logs"


def load_config(env_file: Optional[Path] = None) -> Config:
    """Load configuration from environment and .env file.

    Priority:
        1. Environment variables (highest)
        2. .env file
        3. Default values (lowest)

    Args:
        env_file: Path to .env file. Defaults to .env in current directory.

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If a numeric setting is malformed
    """
    if env_file is None:
        env_file = Path.cwd() / ".env"

    env_vars = load_env_file(Path(env_file))

    return Config(
        db_path=_get_path("FOLIO_DB_PATH", DEFAULT_DB_PATH, env_vars),
        log_path=_get_path("FOLIO_LOG_PATH", DEFAULT_LOG_PATH, env_vars),
        stale_warning_days=_get_int("FOLIO_STALE_WARNING_DAYS", 14, env_vars),
        stale_critical_days=_get_int("FOLIO_STALE_CRITICAL_DAYS", 21, env_vars),
        stale_dead_days=_get_int("FOLIO_STALE_DEAD_DAYS", 30, env_vars),
        nudge_limit=_get_int("FOLIO_NUDGE_LIMIT", 5, env_vars),
        openai_api_key=_get_str("OPENAI_API_KEY", env_vars),
        anthropic_api_key=_get_str("ANTHROPIC_API_KEY", env_vars),
        debug=_get_bool("FOLIO_DEBUG", False, env_vars),
    )


def _check_writable_dir(label: str, directory: Path) -> Optional[str]:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return f"Cannot create {label} directory {directory}: {e}"
    if not os.access(directory, os.W_OK):
        return f"{label.capitalize()} directory not writable: {directory}"
    return None


def validate_config(config: Config) -> list[str]:
    """Validate configuration.

    Checks:
        - Database and log directories exist or can be created
        - Staleness thresholds are positive and strictly increasing
        - Nudge limit is positive

    Args:
        config: Configuration to validate

    Returns:
        List of issues (empty if valid)
    """
    issues: list[str] = []
    for label, directory in (("database", config.db_path.parent), ("log", config.log_path)):
        issue = _check_writable_dir(label, directory)
        if issue:
            issues.append(issue)

    if config.stale_warning_days <= 0:
        issues.append(
            f"CRITICAL: FOLIO_STALE_WARNING_DAYS must be positive, got {config.stale_warning_days}"
        )
    if not (config.stale_warning_days < config.stale_critical_days < config.stale_dead_days):
        issues.append(
            "CRITICAL: Staleness thresholds must increase: "
            f"warning={config.stale_warning_days}, "
            f"critical={config.stale_critical_days}, "
            f"dead={config.stale_dead_days}"
        )

    if config.nudge_limit <= 0:
        issues.append(f"FOLIO_NUDGE_LIMIT must be positive, got {config.nudge_limit}")

    return issues


# Singleton config
_config: Optional[Config] = None


def get_config() -> Config:
    """Return cached configuration singleton.

    Loads configuration on first call, returns cached version thereafter.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset cached configuration.

    Used primarily for testing.
    """
    global _config
    _config = None
