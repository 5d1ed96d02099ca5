"""Configuration parsing for vortex.

Parses config/vortex/config.toml (or .vortex/config.toml) for tracking,
export and upload settings.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Namespace of the host's own built-in content
DEFAULT_RESERVED_NAMESPACES = ("minecraft",)

# Host, loader and aggregator IDs that never count as "unused"
DEFAULT_UNUSED_EXCLUSIONS = ("minecraft", "neoforge", "vortex")

DEFAULT_UPLOAD_ENDPOINT = "https://vortex-dataview.vercel.app/api/submit"
DEFAULT_VIEWER_URL = "https://vortex-dataview.vercel.app/"

CONFIG_LOCATIONS = (
    Path("config") / "vortex" / "config.toml",
    Path(".vortex") / "config.toml",
)


def _string_list(section: str, key: str, value: Any) -> tuple[str, ...]:
    """Validate a TOML value as a list of strings.

    Raises:
        ValueError: If the value is not a string or a list of strings.
    """
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ValueError(
        f"Invalid '{section}.{key}': expected string or list of strings"
    )


def _positive_int(section: str, key: str, value: Any) -> int:
    """Validate a TOML value as a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(f"Invalid '{section}.{key}': expected positive integer")
    return value


def _bool(section: str, key: str, value: Any) -> bool:
    """Validate a TOML value as a boolean."""
    if not isinstance(value, bool):
        raise ValueError(f"Invalid '{section}.{key}': expected true or false")
    return value


@dataclass
class TrackingConfig:
    """Configuration for attribution and reporting."""

    reserved_namespaces: tuple[str, ...] = DEFAULT_RESERVED_NAMESPACES
    unused_exclusions: tuple[str, ...] = DEFAULT_UNUSED_EXCLUSIONS
    report_limit: int = 10  # entries per most/least used list

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrackingConfig:
        """Create a TrackingConfig from the [tracking] table.

        Raises:
            ValueError: If a field has the wrong type.
        """
        return cls(
            reserved_namespaces=_string_list(
                "tracking",
                "reserved_namespaces",
                data.get("reserved_namespaces", list(DEFAULT_RESERVED_NAMESPACES)),
            ),
            unused_exclusions=_string_list(
                "tracking",
                "unused_exclusions",
                data.get("unused_exclusions", list(DEFAULT_UNUSED_EXCLUSIONS)),
            ),
            report_limit=_positive_int(
                "tracking", "report_limit", data.get("report_limit", 10)
            ),
        )


@dataclass
class ExportConfig:
    """Configuration for the CSV export."""

    directory: str = "config/vortex"  # relative to the server directory
    base_name: str = "vortex_mod_usage_data"
    export_on_shutdown: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportConfig:
        """Create an ExportConfig from the [export] table."""
        directory = data.get("directory", "config/vortex")
        base_name = data.get("base_name", "vortex_mod_usage_data")
        if not isinstance(directory, str) or not directory:
            raise ValueError("Invalid 'export.directory': expected non-empty string")
        if not isinstance(base_name, str) or not base_name:
            raise ValueError("Invalid 'export.base_name': expected non-empty string")

        return cls(
            directory=directory,
            base_name=base_name,
            export_on_shutdown=_bool(
                "export", "export_on_shutdown", data.get("export_on_shutdown", True)
            ),
        )


@dataclass
class UploadConfig:
    """Configuration for the web report upload."""

    endpoint: str = DEFAULT_UPLOAD_ENDPOINT
    viewer_url: str = DEFAULT_VIEWER_URL
    timeout: int = 10  # seconds

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UploadConfig:
        """Create an UploadConfig from the [upload] table."""
        endpoint = data.get("endpoint", DEFAULT_UPLOAD_ENDPOINT)
        viewer_url = data.get("viewer_url", DEFAULT_VIEWER_URL)
        for key, value in (("endpoint", endpoint), ("viewer_url", viewer_url)):
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                raise ValueError(f"Invalid 'upload.{key}': expected http(s) URL")

        return cls(
            endpoint=endpoint,
            viewer_url=viewer_url,
            timeout=_positive_int("upload", "timeout", data.get("timeout", 10)),
        )


@dataclass
class Config:
    """Main configuration container."""

    version: str = "1"
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    config_path: Path | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        """Load configuration from a file.

        Args:
            path: Path to config file. If None, searches for config/vortex/config.toml
                  or .vortex/config.toml in current directory and parents.

        Returns:
            Loaded configuration.

        Raises:
            FileNotFoundError: If no config file found.
            ValueError: If config file is invalid.
        """
        if path is None:
            path = cls._find_config()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls._from_dict(data, path)

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> Config:
        """Load configuration or return default if not found."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            return cls()

    @classmethod
    def _find_config(cls) -> Path:
        """Find config file by searching current directory and parents."""
        cwd = Path.cwd()
        for parent in [cwd, *cwd.parents]:
            for location in CONFIG_LOCATIONS:
                config_path = parent / location
                if config_path.exists():
                    return config_path

        # Return expected path even if it doesn't exist
        return cwd / CONFIG_LOCATIONS[0]

    @classmethod
    def _from_dict(cls, data: dict[str, Any], path: Path) -> Config:
        """Create a Config from a dictionary."""
        vortex_section = data.get("vortex", {})
        version = str(vortex_section.get("version", "1"))

        return cls(
            version=version,
            tracking=TrackingConfig.from_dict(data.get("tracking", {})),
            export=ExportConfig.from_dict(data.get("export", {})),
            upload=UploadConfig.from_dict(data.get("upload", {})),
            config_path=path,
        )

    def get_value(self, key_path: str) -> Any:
        """Get a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path to value (e.g. "upload.endpoint").

        Returns:
            The configuration value.

        Raises:
            KeyError: If path is invalid.
        """
        parts = key_path.split(".")
        current = self
        for part in parts:
            if hasattr(current, part):
                current = getattr(current, part)
            elif isinstance(current, dict) and part in current:
                current = current[part]
            else:
                raise KeyError(f"Invalid config path: {key_path}")
        return current
