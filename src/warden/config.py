"""Warden configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


def _name_set(key: str, value: Any) -> frozenset[str]:
    """Read a YAML list of names; a single string is a one-element list."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value})
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{key} must be a list of names, got {value!r}")
    return frozenset(value)


@dataclass
class Config:
    """Warden configuration."""

    home_path: Path = field(default_factory=lambda: Path.home() / ".warden")
    log_level: str = "INFO"
    catalog_path: Path | None = None

    # Global roles that skip grant lookups entirely
    bypass_roles: frozenset[str] = frozenset({"admin"})

    # Permission sets whose holders skip grant lookups entirely
    bypass_permission_sets: frozenset[str] = frozenset()

    # Seed principals and memberships with nothing recorded from role templates
    seed_from_templates: bool = True

    cache_max_entries: int = 1024

    @classmethod
    def load(cls, home_path: Path | None = None) -> Config:
        """Load config from YAML file, env vars, then defaults."""
        config = cls()

        if home_path:
            config.home_path = home_path

        # Override from env
        env_home = os.environ.get("WARDEN_HOME")
        if env_home:
            config.home_path = Path(env_home)

        env_log = os.environ.get("WARDEN_LOG_LEVEL")
        if env_log:
            config.log_level = env_log

        env_catalog = os.environ.get("WARDEN_CATALOG")
        if env_catalog:
            config.catalog_path = Path(env_catalog)

        # Load YAML config if exists
        config_file = config.home_path / "config.yaml"
        if config_file.exists():
            with open(config_file) as f:
                data = yaml.safe_load(f) or {}
            for key, value in data.items():
                if key == "catalog_path":
                    config.catalog_path = Path(value) if value else None
                elif key in ("bypass_roles", "bypass_permission_sets"):
                    setattr(config, key, _name_set(key, value))
                elif hasattr(config, key):
                    expected_type = type(getattr(config, key))
                    if expected_type is Path or isinstance(getattr(config, key), Path):
                        setattr(config, key, Path(value))
                    else:
                        setattr(config, key, expected_type(value))

        return config

    @property
    def config_file(self) -> Path:
        return self.home_path / "config.yaml"

    def save(self) -> None:
        """Save current config to YAML."""
        self.home_path.mkdir(parents=True, exist_ok=True)
        data = {
            "log_level": self.log_level,
            "catalog_path": str(self.catalog_path) if self.catalog_path else None,
            "bypass_roles": sorted(self.bypass_roles),
            "bypass_permission_sets": sorted(self.bypass_permission_sets),
            "seed_from_templates": self.seed_from_templates,
            "cache_max_entries": self.cache_max_entries,
        }
        with open(self.config_file, "w") as f:
            yaml.dump(data, f, default_flow_style=False)
