import dataclasses
import json
import logging

import pytest

from config import DEFAULT_SIMULATION_SETTINGS, load_simulation_settings
from matchengine.game_config import SHOT_DUNK, SHOT_THREE, GameConfig, build_game_config


def test_defaults() -> None:
    cfg = GameConfig()
    assert cfg.foul_limit == 6
    assert cfg.shot_clock_seconds == 24
    assert cfg.min_possession_seconds == 4
    assert cfg.game_minutes == 48
    assert cfg.regulation_seconds == 2880
    assert cfg.default_turnover_rate == pytest.approx(0.08)
    assert cfg.block_rate("perimeter") == pytest.approx(0.10)
    assert cfg.block_rate("inside") == pytest.approx(0.20)

    dunk = cfg.shot_profile(SHOT_DUNK)
    assert (dunk.points, dunk.foul_rate, dunk.and_one_rate, dunk.block_class) == (2, 0.20, 0.25, "inside")
    three = cfg.shot_profile(SHOT_THREE)
    assert three.points == 3
    assert three.make_scale == pytest.approx(0.5)


def test_config_is_frozen() -> None:
    cfg = GameConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.foul_limit = 10  # type: ignore[misc]
    with pytest.raises(TypeError):
        cfg.shot_profiles["dunk"] = None  # type: ignore[index]


def test_build_game_config_overrides_and_merges_shot_profiles() -> None:
    cfg = build_game_config({"foul_rate": 0.04, "shot_profiles": {"dunk": {"foul_rate": 0.1}}})
    assert cfg.foul_rate == pytest.approx(0.04)
    assert cfg.shot_profile(SHOT_DUNK).foul_rate == pytest.approx(0.1)
    assert cfg.shot_profile(SHOT_DUNK).and_one_rate == pytest.approx(0.25)


def test_build_game_config_from_default_settings_matches_defaults() -> None:
    assert build_game_config(DEFAULT_SIMULATION_SETTINGS) == GameConfig()


def test_unknown_key_is_logged_and_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="matchengine.game_config"):
        cfg = build_game_config({"not_a_setting": 1})
    assert cfg == GameConfig()
    assert "CONFIG_UNKNOWN_KEY" in caplog.text


@pytest.mark.parametrize(
    "overrides",
    [
        {"foul_rate": 1.5},
        {"steal_rate": -0.1},
        {"shot_clock_seconds": 0},
        {"min_possession_seconds": 30},
        {"shot_profiles": {"mid": {"block_class": "rim"}}},
    ],
)
def test_out_of_range_values_raise(overrides) -> None:
    with pytest.raises(ValueError):
        build_game_config(overrides)


def test_load_simulation_settings_from_file(tmp_path) -> None:
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({"simulation": {"blowout_margin": 25, "shot_profiles": {"layup": {"and_one_rate": 0.1}}}}))

    settings = load_simulation_settings(str(path))
    assert settings["blowout_margin"] == 25
    assert settings["shot_profiles"]["layup"]["and_one_rate"] == 0.1
    assert settings["shot_profiles"]["layup"]["foul_rate"] == 0.15

    cfg = build_game_config(settings)
    assert cfg.blowout_margin == 25


def test_missing_explicit_settings_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_simulation_settings(str(tmp_path / "missing.json"))
