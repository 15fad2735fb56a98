"""Configuration management for musiclib-native."""

from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from musiclib_native.config.paths import default_config_path
from musiclib_native.platform.logging import logger


def _path_field(default: Path | None = None) -> Any:
    """Create a field for Path objects with proper conversion."""
    return field(default=default, metadata={"path": True})


@dataclass
class Config:
    """Bridge configuration."""

    # Log file path
    log_file: Path | None = _path_field()

    # Metadata backend ("mutagen" or "tinytag") and scheduling discipline
    metadata_backend: str = "mutagen"
    resolver_mode: str = "sync"
    resolver_workers: int = 2

    # Playback triggers
    activity_type: str = "com.juicewrldapi.musicapp.play"
    activity_item_key: str = "mediaItemId"
    url_scheme: str = "musiclibraryapp"
    url_host: str = "play"
    item_id_param: str = "itemId"

    # Embedded provisioning profile checked for the voice entitlement
    provisioning_profile: Path | None = _path_field()

    _instance: ClassVar["Config | None"] = None
    _loaded_from: ClassVar[Path | None] = None

    def __post_init__(self) -> None:
        """Convert string paths to ``Path`` objects using field metadata."""
        for f in fields(self):
            if not f.metadata.get("path", False):
                continue
            value = getattr(self, f.name)
            if isinstance(value, str):
                setattr(self, f.name, Path(value) if value.strip() else None)

    def save(self, target: Path | None = None) -> Path:
        """Save configuration as commented TOML and return the written path."""
        config_dict = asdict(self)
        for key, value in config_dict.items():
            if isinstance(value, Path):
                config_dict[key] = str(value)

        destination = target or default_config_path()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            _ = destination.write_text(self._render_toml(config_dict), encoding="utf-8")
            logger.info("Configuration saved to %s", destination)
        except Exception as e:
            logger.error("Failed to save configuration: %s", e)
            raise
        return destination

    def _render_toml(self, config: dict[str, Any]) -> str:
        """Render configuration as TOML with inline guidance."""

        lines: list[str] = ["# musiclib-native configuration", ""]

        lines.append("# Log file path (optional)")
        lines.append('# Example: log_file = "/path/to/logs/musiclib_native.log"')
        if config["log_file"] is not None:
            lines.append(f"log_file = {self._format_toml_value(config['log_file'])}")
        lines.append("")

        lines.append('# Metadata backend: "mutagen" (default) or "tinytag"')
        lines.append(f"metadata_backend = {self._format_toml_value(config['metadata_backend'])}")
        lines.append('# Resolver scheduling: "sync" (blocking) or "async" (worker pool)')
        lines.append(f"resolver_mode = {self._format_toml_value(config['resolver_mode'])}")
        lines.append(f"resolver_workers = {self._format_toml_value(config['resolver_workers'])}")
        lines.append("")

        lines.append("# Playback triggers")
        for key in ("activity_type", "activity_item_key", "url_scheme", "url_host", "item_id_param"):
            lines.append(f"{key} = {self._format_toml_value(config[key])}")
        lines.append("")

        lines.append("# Embedded provisioning profile checked for the voice entitlement (optional)")
        if config["provisioning_profile"] is not None:
            lines.append(
                f"provisioning_profile = {self._format_toml_value(config['provisioning_profile'])}"
            )
        lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _format_toml_value(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, Path)):
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return str(value)

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load configuration from TOML, falling back to defaults.

        A missing file is not an error: the defaults are returned and
        nothing is written.
        """
        config_file = path or default_config_path()
        if cls._instance is not None and cls._loaded_from == config_file:
            return cls._instance

        try:
            if config_file.exists():
                with open(config_file, "rb") as f:
                    config_dict = tomllib.load(f)

                known = {f.name for f in fields(cls)}
                unknown = sorted(set(config_dict) - known)
                if unknown:
                    logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
                instance = cls(**{k: v for k, v in config_dict.items() if k in known})
                logger.debug("Configuration loaded from %s", config_file)
            else:
                instance = cls()
                logger.debug("No configuration at %s; using defaults", config_file)
        except Exception as e:
            logger.error("Failed to load configuration: %s", e)
            raise

        cls._instance = instance
        cls._loaded_from = config_file
        return instance

    @classmethod
    def reset(cls) -> None:
        """Forget the cached singleton so the next ``load`` rereads disk."""
        cls._instance = None
        cls._loaded_from = None


# Global configuration instance
config = Config.load()
