"""Centralized runtime configuration for geomarcos.

:func:`get_settings` resolves the marker database, data and log locations and
the projected grid used for validation.  Every key can be overridden through
``GEOMARCOS_*`` environment variables or by pointing ``GEOMARCOS_CONFIG_FILE``
to a TOML/YAML document.  Environment variables win over the file.
"""
from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .validation.classifier import UtmBounds

__all__ = ["Settings", "get_settings", "reset_settings"]

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_CONFIG_CACHE: Optional["Settings"] = None
_CONFIG_SOURCE: Optional[Path] = None

_TRUE = {"1", "true", "yes", "on", "sim", "s"}
_FALSE = {"0", "false", "no", "off", "nao", "não", "n"}


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    project_root: Path
    data_dir: Path
    log_dir: Path
    database_url: str
    utm_zone: int = 22
    utm_south: bool = True
    source_epsg: int = 4674
    operator: str = "SYSTEM-AUTO"

    @property
    def utm_bounds(self) -> UtmBounds:
        return UtmBounds(zone=self.utm_zone, south=self.utm_south)

    def as_dict(self) -> Dict[str, Any]:
        """Expose the resolved values as plain JSON types (useful for logging)."""

        return {
            "project_root": str(self.project_root),
            "data_dir": str(self.data_dir),
            "log_dir": str(self.log_dir),
            "database_url": self.database_url,
            "utm_zone": self.utm_zone,
            "utm_south": self.utm_south,
            "utm_epsg": self.utm_bounds.epsg,
            "source_epsg": self.source_epsg,
            "operator": self.operator,
        }


def _normalize_path(value: Optional[str | Path], *, base: Optional[Path]) -> Optional[Path]:
    if value is None or value == "":
        return None
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = (base or _PROJECT_ROOT) / candidate
    return candidate.resolve()


def _load_config_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file '{path}' does not exist")
    suffix = path.suffix.lower()
    if suffix == ".toml":
        with path.open("rb") as handle:
            return tomllib.load(handle)
    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
            return loaded or {}
    raise ValueError(f"Unsupported config file format: '{suffix}'")


def _coalesce_mapping(source: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if not isinstance(source, Mapping):
        return {}
    return source


def _as_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for '{key}': {value!r}")


def _as_int(value: Any, *, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid integer for '{key}': {value!r}") from exc


def _build_settings(config_file: Optional[Path]) -> Settings:
    config_data: Mapping[str, Any] = {}
    config_dir: Optional[Path] = None
    if config_file is not None:
        config_file = _normalize_path(config_file, base=_PROJECT_ROOT)
        if config_file is not None:
            config_data = _load_config_file(config_file)
            config_dir = config_file.parent

    paths_section = _coalesce_mapping(config_data.get("paths"))
    database_section = _coalesce_mapping(config_data.get("database"))
    grid_section = _coalesce_mapping(config_data.get("grid"))
    correction_section = _coalesce_mapping(config_data.get("correction"))

    env = os.environ

    data_dir = _normalize_path(
        env.get("GEOMARCOS_DATA_DIR") or paths_section.get("data"),
        base=config_dir,
    ) or (_PROJECT_ROOT / "data").resolve()

    log_dir = _normalize_path(
        env.get("GEOMARCOS_LOG_DIR") or paths_section.get("logs"),
        base=config_dir,
    ) or (data_dir / "logs").resolve()

    database_url = (
        env.get("GEOMARCOS_DATABASE_URL")
        or database_section.get("url")
        or f"sqlite:///{(data_dir / 'marcos.db').as_posix()}"
    )

    utm_zone = _as_int(env.get("GEOMARCOS_UTM_ZONE") or grid_section.get("utm_zone", 22), key="utm_zone")
    if not 1 <= utm_zone <= 60:
        raise ValueError(f"utm_zone must be between 1 and 60, got {utm_zone}")
    utm_south = _as_bool(
        env.get("GEOMARCOS_UTM_SOUTH", grid_section.get("utm_south", True)),
        key="utm_south",
    )
    source_epsg = _as_int(
        env.get("GEOMARCOS_SOURCE_EPSG") or grid_section.get("source_epsg", 4674),
        key="source_epsg",
    )
    operator = str(env.get("GEOMARCOS_OPERATOR") or correction_section.get("operator") or "SYSTEM-AUTO")

    return Settings(
        project_root=_PROJECT_ROOT.resolve(),
        data_dir=data_dir,
        log_dir=log_dir,
        database_url=str(database_url),
        utm_zone=utm_zone,
        utm_south=utm_south,
        source_epsg=source_epsg,
        operator=operator,
    )


def get_settings(*, refresh: bool = False, config_file: str | Path | None = None) -> Settings:
    """Return the cached :class:`Settings` configuration.

    Parameters
    ----------
    refresh:
        When ``True`` the cached configuration is discarded and recomputed.
    config_file:
        Optional explicit path to the configuration document. When provided the
        returned instance is not cached globally, allowing callers (e.g. tests)
        to override settings temporarily.
    """

    global _CONFIG_CACHE, _CONFIG_SOURCE

    explicit_path = Path(config_file).expanduser() if config_file is not None else None

    if explicit_path is not None:
        return _build_settings(explicit_path)

    env_path = os.getenv("GEOMARCOS_CONFIG_FILE")
    source_path = Path(env_path).expanduser() if env_path else None

    if refresh or _CONFIG_CACHE is None or _CONFIG_SOURCE != source_path:
        _CONFIG_CACHE = _build_settings(source_path)
        _CONFIG_SOURCE = source_path

    return _CONFIG_CACHE


def reset_settings() -> None:
    """Clear the cached configuration (mainly useful for tests)."""

    global _CONFIG_CACHE, _CONFIG_SOURCE
    _CONFIG_CACHE = None
    _CONFIG_SOURCE = None
