"""Configuration helpers for the deal analytics thresholds and forecast horizons."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files or values are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

ENV_PREFIX = "DEAL_DASHBOARD_"


@dataclass(frozen=True)
class Settings:
    """Thresholds used by the time-dependent analytics."""

    cold_deal_days: int = 14
    unhandled_lead_hours: int = 48
    forecast_short: int = 30
    forecast_mid: int = 60
    forecast_long: int = 90

    @property
    def forecast_horizons(self) -> Tuple[int, int, int]:
        return (self.forecast_short, self.forecast_mid, self.forecast_long)


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - dependency optional
            raise ConfigurationError(
                "YAML configuration requires the 'pyyaml' package to be installed"
            ) from exc
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def settings_from_mapping(data: Mapping[str, Any], base: Optional[Settings] = None) -> Settings:
    """Build :class:`Settings` from a plain mapping, ignoring unknown keys."""

    settings = base or Settings()
    overrides: Dict[str, int] = {}
    for setting in fields(Settings):
        if setting.name not in data or data[setting.name] is None:
            continue
        overrides[setting.name] = _coerce_int(setting.name, data[setting.name])

    unknown = sorted(set(data) - {setting.name for setting in fields(Settings)})
    if unknown:
        LOGGER.debug("Ignoring unknown configuration keys: %s", ", ".join(map(str, unknown)))

    return replace(settings, **overrides)


def settings_from_environ(environ: Optional[Mapping[str, str]] = None, base: Optional[Settings] = None) -> Settings:
    """Overlay ``DEAL_DASHBOARD_*`` environment variables on top of ``base``."""

    environ = os.environ if environ is None else environ
    values: Dict[str, str] = {}
    for setting in fields(Settings):
        raw = environ.get(f"{ENV_PREFIX}{setting.name.upper()}")
        if raw is not None and raw.strip():
            values[setting.name] = raw
    return settings_from_mapping(values, base=base)


def load_settings(
    path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve settings from defaults, then an optional file, then the environment."""

    settings = Settings()
    if path is not None:
        settings = settings_from_mapping(load_configuration(path), base=settings)
    settings = settings_from_environ(environ, base=settings)
    LOGGER.debug("Resolved analytics settings: %s", settings)
    return settings


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Setting '{name}' must be an integer, got {value!r}")
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise ConfigurationError(f"Setting '{name}' must be an integer, got {value!r}") from exc
    if number < 0:
        raise ConfigurationError(f"Setting '{name}' must not be negative, got {number}")
    return number


__all__ = [
    "ConfigurationError",
    "Settings",
    "load_configuration",
    "load_settings",
    "settings_from_environ",
    "settings_from_mapping",
]
