from location_map.config import (
    CONFIG_FILENAME,
    MapSettings,
    config_path,
    load_map_settings,
    resolve_path,
    save_map_settings,
)


def test_missing_config_returns_defaults(tmp_path):
    assert load_map_settings(tmp_path / "main.py") == MapSettings()


def test_config_path_sits_next_to_main_script(tmp_path):
    assert config_path(tmp_path / "main.py") == tmp_path.resolve() / CONFIG_FILENAME


def test_load_reads_sections(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        "[viewport]\n"
        "max_scale = 4\n"
        "double_tap_scale = 2.5\n"
        "reset_on_focus = yes\n"
        "[markers]\n"
        "hit_radius = 30\n"
        "cull_offscreen = true\n"
        "[paths]\n"
        "map_image = maps/park.png\n",
        encoding="utf-8",
    )

    settings = load_map_settings(tmp_path / "main.py")

    assert settings.max_scale == 4.0
    assert settings.double_tap_scale == 2.5
    assert settings.reset_on_focus is True
    assert settings.hit_radius == 30.0
    assert settings.cull_offscreen is True
    assert settings.map_image == "maps/park.png"
    assert settings.locations_file == "locations.json"


def test_invalid_values_fall_back(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        "[viewport]\nmax_scale = lots\nreset_on_focus = maybe\n", encoding="utf-8"
    )

    settings = load_map_settings(tmp_path / "main.py")

    assert settings.max_scale == 3.0
    assert settings.reset_on_focus is False


def test_unreadable_config_returns_defaults(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("max_scale = 4\n", encoding="utf-8")
    assert load_map_settings(tmp_path / "main.py") == MapSettings()


def test_normalized_repairs_out_of_range_values():
    settings = MapSettings(
        min_scale=0.5, max_scale=0.8, double_tap_scale=5.0, wheel_step=0.9, hit_radius=-1
    ).normalized()

    assert settings.min_scale == 1.0
    assert settings.max_scale == 1.0
    assert settings.double_tap_scale == 1.0
    assert settings.wheel_step == 1.15
    assert settings.hit_radius == 20.0


def test_save_round_trip_keeps_other_sections(tmp_path):
    main_script = tmp_path / "main.py"
    (tmp_path / CONFIG_FILENAME).write_text("[window]\nwidth = 800\n", encoding="utf-8")

    save_map_settings(MapSettings(max_scale=5.0, cull_offscreen=True), main_script)

    text = (tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8")
    assert "[window]" in text
    assert "cull_offscreen = true" in text
    loaded = load_map_settings(main_script)
    assert loaded.max_scale == 5.0
    assert loaded.cull_offscreen is True


def test_resolve_path_is_relative_to_config_dir(tmp_path):
    main_script = tmp_path / "main.py"
    assert resolve_path("", main_script) is None
    assert resolve_path("maps/park.png", main_script) == tmp_path.resolve() / "maps/park.png"
    absolute = tmp_path / "elsewhere.png"
    assert resolve_path(str(absolute), main_script) == absolute
