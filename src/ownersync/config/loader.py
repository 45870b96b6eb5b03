"""Load and merge configuration from .ownersync.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from ownersync.config.schema import (
    CommitConfig,
    FileConfig,
    GitHubConfig,
    IdentityConfig,
    OwnersyncConfig,
    SigningConfig,
)

CONFIG_FILENAME = ".ownersync.toml"


class ConfigError(Exception):
    """Raised when config is malformed, unreadable, or incomplete."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


# (env var, section, field) — names follow the GitHub/GPG conventions CI
# systems already export.
_ENV_OVERRIDES = [
    ("GITHUB_TOKEN", "github", "token"),
    ("OWNERSYNC_API_URL", "github", "api_url"),
    ("GITHUB_USERNAME", "identity", "username"),
    ("GITHUB_EMAIL", "identity", "email"),
    ("GPG_SECRET_KEY", "signing", "gpg_secret_key"),
    ("GPG_PASSPHRASE", "signing", "gpg_passphrase"),
    ("COMMIT_MESSAGE_PREFIX", "commit", "message_prefix"),
    ("OWNERSYNC_FILE_PATH", "file", "path"),
]


def _merge_env_overrides(cfg: OwnersyncConfig) -> None:
    """Apply environment variable overrides on top of the file values."""
    for env_name, section, name in _ENV_OVERRIDES:
        if val := os.environ.get(env_name):
            setattr(getattr(cfg, section), name, val)
    if val := os.environ.get("OWNERSYNC_TIMEOUT"):
        try:
            cfg.github.timeout = float(val)
        except ValueError:
            pass


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.get(section, {}).items() if k in valid_fields}
    return cls(**filtered)


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> OwnersyncConfig:
    """Load and return an OwnersyncConfig (not yet validated)."""
    config_path = find_config_file(root, config_override)

    if config_path is None:
        cfg = OwnersyncConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = OwnersyncConfig(
            version=raw.get("version", "1.0"),
            github=_build_section(raw, GitHubConfig, "github"),
            identity=_build_section(raw, IdentityConfig, "identity"),
            signing=_build_section(raw, SigningConfig, "signing"),
            commit=_build_section(raw, CommitConfig, "commit"),
            file=_build_section(raw, FileConfig, "file"),
        )

    _merge_env_overrides(cfg)
    return cfg


def validate_config(cfg: OwnersyncConfig) -> None:
    """Raise ConfigError if settings needed to talk to GitHub are missing."""
    missing: List[str] = []
    if not cfg.github.token:
        missing.append("github.token (GITHUB_TOKEN)")
    if not cfg.identity.username:
        missing.append("identity.username (GITHUB_USERNAME)")
    if not cfg.identity.email:
        missing.append("identity.email (GITHUB_EMAIL)")
    if missing:
        raise ConfigError("Missing required settings: " + ", ".join(missing))
    if not cfg.file.path:
        raise ConfigError("file.path must not be empty")
