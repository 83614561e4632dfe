"""Configuration helpers for Location Map settings persistence."""
from __future__ import annotations

from configparser import ConfigParser, Error
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import sys
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "location_map.ini"
_VIEWPORT_SECTION = "viewport"
_MARKERS_SECTION = "markers"
_PATHS_SECTION = "paths"


@dataclass
class MapSettings:
    min_scale: float = 1.0
    max_scale: float = 3.0
    double_tap_scale: float = 2.0
    wheel_step: float = 1.15
    reset_on_focus: bool = False
    hit_radius: float = 20.0
    cull_offscreen: bool = False
    map_image: str = ""
    locations_file: str = "locations.json"

    def normalized(self) -> "MapSettings":
        """Return a copy with out-of-range values replaced by safe ones."""
        defaults = MapSettings()
        min_scale = max(1.0, self.min_scale)
        max_scale = max(min_scale, self.max_scale)
        double_tap = min(max(self.double_tap_scale, min_scale), max_scale)
        wheel_step = self.wheel_step if self.wheel_step > 1.0 else defaults.wheel_step
        hit_radius = self.hit_radius if self.hit_radius > 0 else defaults.hit_radius
        return MapSettings(
            min_scale=min_scale,
            max_scale=max_scale,
            double_tap_scale=double_tap,
            wheel_step=wheel_step,
            reset_on_focus=self.reset_on_focus,
            hit_radius=hit_radius,
            cull_offscreen=self.cull_offscreen,
            map_image=self.map_image,
            locations_file=self.locations_file or defaults.locations_file,
        )


def _config_dir(main_script_path: Optional[Path]) -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    if main_script_path is not None:
        return main_script_path.resolve().parent
    main_module = sys.modules.get("__main__")
    if main_module and getattr(main_module, "__file__", None):
        return Path(main_module.__file__).resolve().parent
    return Path.cwd()


def config_path(main_script_path: Optional[Path]) -> Path:
    return _config_dir(main_script_path) / CONFIG_FILENAME


def resolve_path(value: str, main_script_path: Optional[Path]) -> Optional[Path]:
    """Resolve a configured path relative to the config directory."""
    if not value:
        return None
    candidate = Path(value).expanduser()
    if not candidate.is_absolute():
        candidate = _config_dir(main_script_path) / candidate
    return candidate


def _read_parser(ini_path: Path) -> Optional[ConfigParser]:
    parser = ConfigParser()
    parser.optionxform = str
    try:
        with ini_path.open("r", encoding="utf-8") as handle:
            parser.read_file(handle)
    except (OSError, Error) as exc:
        logger.warning("Could not read %s: %s", ini_path, exc)
        return None
    return parser


def _get_float(parser: ConfigParser, section: str, key: str, fallback: float) -> float:
    try:
        return parser.getfloat(section, key, fallback=fallback)
    except ValueError:
        logger.warning("Invalid number for [%s] %s; using %s", section, key, fallback)
        return fallback


def _get_bool(parser: ConfigParser, section: str, key: str, fallback: bool) -> bool:
    try:
        return parser.getboolean(section, key, fallback=fallback)
    except ValueError:
        logger.warning("Invalid flag for [%s] %s; using %s", section, key, fallback)
        return fallback


def load_map_settings(main_script_path: Optional[Path]) -> MapSettings:
    defaults = MapSettings()
    ini_path = config_path(main_script_path)
    if not ini_path.exists():
        return defaults
    parser = _read_parser(ini_path)
    if parser is None:
        return defaults
    settings = MapSettings(
        min_scale=_get_float(parser, _VIEWPORT_SECTION, "min_scale", defaults.min_scale),
        max_scale=_get_float(parser, _VIEWPORT_SECTION, "max_scale", defaults.max_scale),
        double_tap_scale=_get_float(
            parser, _VIEWPORT_SECTION, "double_tap_scale", defaults.double_tap_scale
        ),
        wheel_step=_get_float(parser, _VIEWPORT_SECTION, "wheel_step", defaults.wheel_step),
        reset_on_focus=_get_bool(
            parser, _VIEWPORT_SECTION, "reset_on_focus", defaults.reset_on_focus
        ),
        hit_radius=_get_float(parser, _MARKERS_SECTION, "hit_radius", defaults.hit_radius),
        cull_offscreen=_get_bool(
            parser, _MARKERS_SECTION, "cull_offscreen", defaults.cull_offscreen
        ),
        map_image=parser.get(_PATHS_SECTION, "map_image", fallback=defaults.map_image),
        locations_file=parser.get(
            _PATHS_SECTION, "locations_file", fallback=defaults.locations_file
        ),
    )
    return settings.normalized()


def save_map_settings(settings: MapSettings, main_script_path: Optional[Path]) -> None:
    config = ConfigParser()
    config.optionxform = str
    ini_path = config_path(main_script_path)
    if ini_path.exists():
        try:
            with ini_path.open("r", encoding="utf-8") as handle:
                config.read_file(handle)
        except (OSError, Error):
            return
    config[_VIEWPORT_SECTION] = {
        "min_scale": str(settings.min_scale),
        "max_scale": str(settings.max_scale),
        "double_tap_scale": str(settings.double_tap_scale),
        "wheel_step": str(settings.wheel_step),
        "reset_on_focus": str(settings.reset_on_focus).lower(),
    }
    config[_MARKERS_SECTION] = {
        "hit_radius": str(settings.hit_radius),
        "cull_offscreen": str(settings.cull_offscreen).lower(),
    }
    config[_PATHS_SECTION] = {
        "map_image": settings.map_image,
        "locations_file": settings.locations_file,
    }
    try:
        with ini_path.open("w", encoding="utf-8") as handle:
            config.write(handle)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        logger.warning("Could not write %s: %s", ini_path, exc)
