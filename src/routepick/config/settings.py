# src/routepick/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/routepick/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `ROUTEPICK_CONFIG_PATH`
- environment variables (e.g., `ROUTEPICK_ROUTING_URL`, `ROUTEPICK_LOG_LEVEL`)

Design rule:
- Service URLs, timeouts and tariffs live in YAML, not hard-coded in session logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from routepick.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `routepick.config`."""
    text = resources.files("routepick.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "RoutePick"
    log_level: str = "INFO"
    user_agent: str = "routepick/0.1.0 (+https://local)"
    logger_levels: dict[str, str] = Field(default_factory=dict)


class GeocodingSettings(BaseModel):
    base_url: str = "https://nominatim.openstreetmap.org/reverse"
    timeout_seconds: float = Field(8, gt=0)
    fallback_precision: int = Field(5, ge=0, le=8)
    language: str | None = None
    zoom: int = Field(18, ge=0, le=18)


class RetrySettings(BaseModel):
    max_attempts: int = Field(1, ge=0)
    base_delay_seconds: float = Field(0.5, ge=0)
    max_delay_seconds: float = Field(2.0, ge=0)


class RoutingSettings(BaseModel):
    base_url: str = "https://router.project-osrm.org"
    profile: str = "driving"
    timeout_seconds: float = Field(10, gt=0)
    retry: RetrySettings = Field(default_factory=RetrySettings)


class TileLayerSettings(BaseModel):
    url_template: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    attribution: str = "&copy; OpenStreetMap contributors"
    max_zoom: int = 19


class MapSettings(BaseModel):
    tile_layer: TileLayerSettings = Field(default_factory=TileLayerSettings)
    default_center: tuple[float, float] = (33.5731, -7.5898)
    default_zoom: int = Field(13, ge=0, le=22)


class VehicleTariff(BaseModel):
    code: str
    label: str
    base_fare: float = Field(..., ge=0)
    per_km: float = Field(..., ge=0)
    speed_factor: float = Field(1.0, gt=0)
    max_distance_km: float | None = Field(default=None, gt=0)


class ApiSettings(BaseModel):
    session_ttl_seconds: float = Field(1800, gt=0)
    max_sessions: int = Field(1000, ge=1)


class DeliverySettings(BaseModel):
    currency: str = "MAD"
    average_speed_kmh: float = Field(30, gt=0)
    vehicles: list[VehicleTariff] = Field(default_factory=list)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    delivery: DeliverySettings = Field(default_factory=DeliverySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("ROUTEPICK_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    geocoding_url = os.getenv("ROUTEPICK_GEOCODING_URL")
    if geocoding_url:
        data.setdefault("geocoding", {})["base_url"] = geocoding_url

    routing_url = os.getenv("ROUTEPICK_ROUTING_URL")
    if routing_url:
        data.setdefault("routing", {})["base_url"] = routing_url

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("ROUTEPICK_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
