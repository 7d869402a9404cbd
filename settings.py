"""
settings.py

Persistent settings management for Pixeloid.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/pixeloid/settings.toml
    - macOS: ~/Library/Application Support/pixeloid/settings.toml
    - Linux: ~/.config/pixeloid/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from geometry.errors import ConfigurationError

APP_NAME = "pixeloid"

# Circle vertex count shared by the circle generator and calculator
DEFAULT_CIRCLE_SEGMENTS = 8

log = logging.getLogger(__name__)

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


def set_settings(manager: Optional["SettingsManager"]) -> None:
    """Replace (or with ``None``, reset) the global settings manager."""
    global _settings_manager
    _settings_manager = manager


# =============================================================================
# Grid & Navigation Settings
# =============================================================================

@dataclass
class GridSettings:
    """Grid cell mapping.

    Defaults:
        cell_size: 10.0
    """
    cell_size: float = 10.0  # Default: 10.0 screen pixels per grid cell


@dataclass
class NavigationSettings:
    """Pan behaviour.

    Defaults:
        move_amount: 5
    """
    move_amount: int = 5  # Default: 5 grid cells per pan step


# =============================================================================
# Geometry Settings
# =============================================================================

@dataclass
class GeometrySettings:
    """Shape generation and calculation settings.

    Defaults:
        circle_segments: 8
        tolerance: 1e-9
    """
    circle_segments: int = DEFAULT_CIRCLE_SEGMENTS  # Default: 8, must be a multiple of 4
    tolerance: float = 1e-9                         # Default: 1e-9, relative to shape size


@dataclass
class HitTestSettings:
    """Hit-testing tolerances, in grid cells.

    Defaults:
        point_distance: 0.5
        line_distance: 0.5
    """
    point_distance: float = 0.5  # Default: 0.5 cells
    line_distance: float = 0.5   # Default: 0.5 cells


@dataclass
class ReadoutSettings:
    """Coordinate readout throttling.

    Defaults:
        interval_ms: 50
    """
    interval_ms: int = 50  # Default: 50 ms between readout updates


# =============================================================================
# Default Style Settings
# =============================================================================

@dataclass
class StyleDefaults:
    """Default style for newly created objects.

    Defaults:
        color: "#FF0000"
        stroke_width: 2.0
        stroke_alpha: 1.0
        fill_color: "" (no fill)
        fill_alpha: 0.0
    """
    color: str = "#FF0000"       # Default: red
    stroke_width: float = 2.0    # Default: 2.0
    stroke_alpha: float = 1.0    # Default: opaque
    fill_color: str = ""         # Default: no fill
    fill_alpha: float = 0.0      # Default: 0.0


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values."""
    grid: GridSettings = field(default_factory=GridSettings)
    navigation: NavigationSettings = field(default_factory=NavigationSettings)
    geometry: GeometrySettings = field(default_factory=GeometrySettings)
    hit_test: HitTestSettings = field(default_factory=HitTestSettings)
    readout: ReadoutSettings = field(default_factory=ReadoutSettings)
    style: StyleDefaults = field(default_factory=StyleDefaults)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Override for the config directory (tests, portable installs).
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Union[str, Path]] = None):
        if settings_dir is None:
            settings_dir = platformdirs.user_config_dir(app_name)
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)
            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        grid = data.get("grid", {})
        settings.grid.cell_size = float(grid.get("cell_size", settings.grid.cell_size))

        nav = data.get("navigation", {})
        settings.navigation.move_amount = int(nav.get("move_amount", settings.navigation.move_amount))

        geo = data.get("geometry", {})
        settings.geometry.circle_segments = int(geo.get("circle_segments", settings.geometry.circle_segments))
        settings.geometry.tolerance = float(geo.get("tolerance", settings.geometry.tolerance))

        hit = data.get("hit_test", {})
        settings.hit_test.point_distance = float(hit.get("point_distance", settings.hit_test.point_distance))
        settings.hit_test.line_distance = float(hit.get("line_distance", settings.hit_test.line_distance))

        ro = data.get("readout", {})
        settings.readout.interval_ms = int(ro.get("interval_ms", settings.readout.interval_ms))

        st = data.get("style", {})
        settings.style.color = st.get("color", settings.style.color)
        settings.style.stroke_width = float(st.get("stroke_width", settings.style.stroke_width))
        settings.style.stroke_alpha = float(st.get("stroke_alpha", settings.style.stroke_alpha))
        settings.style.fill_color = st.get("fill_color", settings.style.fill_color)
        settings.style.fill_alpha = float(st.get("fill_alpha", settings.style.fill_alpha))

        return settings

    def validate(self) -> None:
        """Check that settings values are usable.

        Raises:
            ConfigurationError: on a non-positive cell size, a circle segment
                count that is not a positive multiple of 4, or a negative
                tolerance.
        """
        s = self.settings
        if s.grid.cell_size <= 0:
            raise ConfigurationError(f"grid.cell_size must be > 0, got {s.grid.cell_size}")
        n = s.geometry.circle_segments
        if n <= 0 or n % 4 != 0:
            raise ConfigurationError(f"geometry.circle_segments must be a positive multiple of 4, got {n}")
        if s.geometry.tolerance < 0:
            raise ConfigurationError(f"geometry.tolerance must be >= 0, got {s.geometry.tolerance}")
        if s.hit_test.point_distance < 0 or s.hit_test.line_distance < 0:
            raise ConfigurationError("hit_test distances must be >= 0")
        if s.readout.interval_ms < 0:
            raise ConfigurationError(f"readout.interval_ms must be >= 0, got {s.readout.interval_ms}")

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        with open(self.settings_file, "wb") as f:
            tomli_w.dump(self._to_toml_dict(), f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure."""
        s = self.settings
        return {
            "grid": {
                "cell_size": s.grid.cell_size,
            },
            "navigation": {
                "move_amount": s.navigation.move_amount,
            },
            "geometry": {
                "circle_segments": s.geometry.circle_segments,
                "tolerance": s.geometry.tolerance,
            },
            "hit_test": {
                "point_distance": s.hit_test.point_distance,
                "line_distance": s.hit_test.line_distance,
            },
            "readout": {
                "interval_ms": s.readout.interval_ms,
            },
            "style": {
                "color": s.style.color,
                "stroke_width": s.style.stroke_width,
                "stroke_alpha": s.style.stroke_alpha,
                "fill_color": s.style.fill_color,
                "fill_alpha": s.style.fill_alpha,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string."""
        return tomli_w.dumps(self._to_toml_dict())

    def get_settings_path(self) -> Path:
        """Get the path to the settings file."""
        return self.settings_file
