"""Entry point for the standalone Location Map viewer."""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import sys

from PyQt5 import QtCore, QtWidgets

from location_map.config import (
    MapSettings,
    config_path,
    load_map_settings,
    save_map_settings,
)
from location_map.widget.map_window import LocationMapWindow

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    base_dir = os.path.dirname(sys.argv[0])
    log_path = os.path.join(base_dir, "location_map_log.txt")

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="a", encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
    )


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Interactive location map")
    parser.add_argument("--image", help="Background map image (overrides the INI)")
    parser.add_argument("--locations", help="Locations JSON file (overrides the INI)")
    parser.add_argument("--debug", action="store_true", help="Log gesture frames")
    args, _qt_args = parser.parse_known_args(argv[1:])
    return args


def apply_path_overrides(
    settings: MapSettings,
    image: str | None,
    locations: str | None,
    main_script_path: Path,
) -> MapSettings:
    """Apply command line paths and remember them for the next start."""
    if not image and not locations:
        return settings
    if image:
        settings.map_image = str(Path(image).resolve())
    if locations:
        settings.locations_file = str(Path(locations).resolve())
    save_map_settings(settings, main_script_path)
    logger.info("Saved map paths to %s", config_path(main_script_path))
    return settings


def main() -> None:
    args = _parse_args(sys.argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO)
    logger.info("Starting Location Map")

    main_script_path = Path(__file__).resolve()
    settings = apply_path_overrides(
        load_map_settings(main_script_path), args.image, args.locations, main_script_path
    )

    QtCore.QCoreApplication.setOrganizationName("location-map")
    QtCore.QCoreApplication.setApplicationName("Location Map")
    app = QtWidgets.QApplication(sys.argv)

    window = LocationMapWindow(settings, main_script_path=main_script_path)
    window.show()

    def cleanup():
        try:
            window.shutdown()
        except Exception:  # pragma: no cover - best effort
            logger.exception("Unexpected error while stopping the interaction thread")

    app.aboutToQuit.connect(cleanup)

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
