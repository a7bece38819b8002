"""Configuration helpers for copy-env-keys-to-env-example."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional
import os

DEFAULT_PRIMARY_SOURCE = ".env"
DEFAULT_SECONDARY_SOURCE = ".env.local"
DEFAULT_OUTPUT = ".env.example"


def _str_to_bool(value: Optional[str], *, default: bool = False) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _config_str(env_var: str, default: str) -> str:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    return value.strip()


def _config_bool(env_var: str, default: bool) -> bool:
    return _str_to_bool(os.getenv(env_var), default=default)


def resolve_path(base_dir: Path, value: Path | str) -> Path:
    """Resolve ``value`` against ``base_dir`` unless it is absolute."""
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return base_dir / path


@dataclass
class Settings:
    """Run settings; defaults come from ``ENV_KEYS_*`` environment variables."""

    base_dir: Path = field(default_factory=Path.cwd)
    primary_source: str = field(
        default_factory=lambda: _config_str(
            "ENV_KEYS_PRIMARY_SOURCE", DEFAULT_PRIMARY_SOURCE
        )
    )
    secondary_source: str = field(
        default_factory=lambda: _config_str(
            "ENV_KEYS_SECONDARY_SOURCE", DEFAULT_SECONDARY_SOURCE
        )
    )
    output: str = field(
        default_factory=lambda: _config_str("ENV_KEYS_OUTPUT", DEFAULT_OUTPUT)
    )
    dry_run: bool = field(
        default_factory=lambda: _config_bool("ENV_KEYS_DRY_RUN", False)
    )

    @property
    def primary_path(self) -> Path:
        return resolve_path(self.base_dir, self.primary_source)

    @property
    def secondary_path(self) -> Path:
        return resolve_path(self.base_dir, self.secondary_source)

    @property
    def output_path(self) -> Path:
        return resolve_path(self.base_dir, self.output)

    def display_path(self, path: Path) -> str:
        """Path relative to ``base_dir`` when possible, for messages."""
        try:
            return str(path.relative_to(self.base_dir))
        except ValueError:
            return str(path)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy of the settings with specified attributes replaced."""
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Expose a dict representation for debugging."""
        return {
            "base_dir": str(self.base_dir),
            "primary_path": str(self.primary_path),
            "secondary_path": str(self.secondary_path),
            "output_path": str(self.output_path),
            "dry_run": self.dry_run,
        }
