import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

logger = logging.getLogger(__name__)

SIMULATION_CONFIG_FILENAME = "simulation_config.json"

# 경기 규칙 기본값
QUARTER_MINUTES = 12
QUARTERS = 4
SHOT_CLOCK_SECONDS = 24
MIN_POSSESSION_SECONDS = 4
FOUL_LIMIT = 6
BLOWOUT_MARGIN = 20
OVERTIME_SECONDS = 300

# 확률 기본값 (per possession / per shot)
FOUL_RATE = 0.05
DEFENSIVE_FOUL_SHARE = 0.75
STEAL_RATE = 0.05
PERIMETER_BLOCK_RATE = 0.10
INSIDE_BLOCK_RATE = 0.20
DEFENSIVE_REBOUND_RATE = 0.75
DEFAULT_TURNOVER_RATE = 0.08
ASSIST_RATE = 0.57
THREE_POINT_CUTOFF = 0.85
THREE_POINT_MAKE_SCALE = 0.5

# 체력 / 교체
SUB_ENERGY_THRESHOLD = 0.6
ENERGY_RATE_DIVISOR = 1000
MAX_OFFENSIVE_REBOUNDS = 4

# Per shot type: points, foul rate, free throws awarded on a shooting foul,
# block class, and-one rate. Make probability is the shot attribute times make_scale.
SHOT_PROFILES: Dict[str, Dict[str, Any]] = {
    "three": {"points": 3, "foul_rate": 0.03, "free_throws": 3, "block_class": "perimeter",
              "and_one_rate": 0.02, "make_scale": THREE_POINT_MAKE_SCALE},
    "mid": {"points": 2, "foul_rate": 0.08, "free_throws": 2, "block_class": "perimeter",
            "and_one_rate": 0.05, "make_scale": 1.0},
    "dunk": {"points": 2, "foul_rate": 0.20, "free_throws": 2, "block_class": "inside",
             "and_one_rate": 0.25, "make_scale": 1.0},
    "layup": {"points": 2, "foul_rate": 0.15, "free_throws": 2, "block_class": "inside",
              "and_one_rate": 0.15, "make_scale": 1.0},
}

DEFAULT_SIMULATION_SETTINGS: Dict[str, Any] = {
    "quarter_minutes": QUARTER_MINUTES,
    "quarters": QUARTERS,
    "shot_clock_seconds": SHOT_CLOCK_SECONDS,
    "min_possession_seconds": MIN_POSSESSION_SECONDS,
    "foul_limit": FOUL_LIMIT,
    "blowout_margin": BLOWOUT_MARGIN,
    "foul_rate": FOUL_RATE,
    "defensive_foul_share": DEFENSIVE_FOUL_SHARE,
    "steal_rate": STEAL_RATE,
    "perimeter_block_rate": PERIMETER_BLOCK_RATE,
    "inside_block_rate": INSIDE_BLOCK_RATE,
    "defensive_rebound_rate": DEFENSIVE_REBOUND_RATE,
    "default_turnover_rate": DEFAULT_TURNOVER_RATE,
    "assist_rate": ASSIST_RATE,
    "three_point_cutoff": THREE_POINT_CUTOFF,
    "sub_energy_threshold": SUB_ENERGY_THRESHOLD,
    "energy_rate_divisor": ENERGY_RATE_DIVISOR,
    "max_offensive_rebounds": MAX_OFFENSIVE_REBOUNDS,
    "overtime_enabled": True,
    "overtime_seconds": OVERTIME_SECONDS,
    "shot_profiles": SHOT_PROFILES,
}


def _find_json_path(filename: str) -> Optional[str]:
    """Find a config json file in common locations.

    Search order (first hit wins):
      1) project root: <project>/<filename>
      2) project data dir: <project>/data/<filename>
      3) project config dir: <project>/config/<filename>
    """
    candidates = [
        os.path.join(BASE_DIR, filename),
        os.path.join(BASE_DIR, "data", filename),
        os.path.join(BASE_DIR, "config", filename),
    ]
    for path in candidates:
        if os.path.exists(path):
            return path
    return None


def _merge_settings(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = _merge_settings(out[key], value)
        else:
            out[key] = value
    return out


def load_simulation_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """Return DEFAULT_SIMULATION_SETTINGS merged with an optional JSON override file.

    Expected format:
      { "foul_rate": 0.04, "shot_profiles": {"dunk": {"foul_rate": 0.18}} }
    Also accepts {"simulation": {...}} for flexibility.

    An explicit path that does not exist raises FileNotFoundError; a missing default
    file is a no-op.
    """
    if path is None:
        path = _find_json_path(SIMULATION_CONFIG_FILENAME)
        if not path:
            return _merge_settings(DEFAULT_SIMULATION_SETTINGS, {})
    elif not os.path.exists(path):
        raise FileNotFoundError(f"simulation config not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and isinstance(data.get("simulation"), dict):
        data = data["simulation"]
    if not isinstance(data, dict):
        raise ValueError(f"simulation config must be a JSON object: {path}")

    logger.debug("loaded simulation overrides from %s (%d keys)", path, len(data))
    return _merge_settings(DEFAULT_SIMULATION_SETTINGS, data)
