"""
Default settings for the HRG multiplicity sampler.

Tunable defaults (trial cap, nucleon mass, pair-table tail width, seed)
are loaded from defaults.json if available, otherwise the in-code values
below are used.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional

# =============================================================================
# Load Defaults from JSON
# =============================================================================

# Path to defaults.json (same directory as this file)
_DEFAULTS_JSON_PATH = Path(__file__).parent / "defaults.json"

_DEFAULT_SETTINGS: Dict[str, Any] = {
    "max_trials": 1000000,  # Rejection-loop cap for CE/SCE/CCE (None = unbounded)
    "nucleon_mass_gev": 0.938,  # GeV
    "pair_tail_sigmas": 12.0,  # Width of the fixed-difference pair table
    "pair_tail_padding": 20,  # Extra entries beyond the tail width
    "seed": None,  # Default seed for new generators (None = OS entropy)
}


def load_defaults_from_json() -> Dict[str, Any]:
    """
    Load sampler defaults from defaults.json.

    If the file doesn't exist or is invalid, returns the in-code defaults.

    Returns:
        Dictionary with setting names as keys and values.
    """
    if _DEFAULTS_JSON_PATH.exists():
        try:
            with open(_DEFAULTS_JSON_PATH, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
                # Merge with defaults to ensure all keys exist
                result = _DEFAULT_SETTINGS.copy()
                result.update(loaded)
                return result
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Failed to load defaults.json: {e}. Using defaults.")
            return _DEFAULT_SETTINGS.copy()
    else:
        return _DEFAULT_SETTINGS.copy()


def save_defaults_to_json(settings: Dict[str, Any], path: Optional[Path] = None) -> None:
    """
    Save sampler defaults to a JSON file.

    Args:
        settings: Dictionary with setting names and values.
        path: Target file. Defaults to the packaged defaults.json.
    """
    target = Path(path) if path is not None else _DEFAULTS_JSON_PATH
    with open(target, 'w', encoding='utf-8') as f:
        json.dump(settings, f, indent=4)


def get_defaults_json_path() -> Path:
    """Return the path to the defaults.json file."""
    return _DEFAULTS_JSON_PATH


# Load settings at module import time
_LOADED_SETTINGS = load_defaults_from_json()

# =============================================================================
# Sampling Defaults
# =============================================================================

# Maximum number of trials per canonical event before giving up.
# None disables the cap.
MAX_TRIALS: Optional[int] = _LOADED_SETTINGS["max_trials"]

# Width (in standard deviations) of the fixed-difference pair table
PAIR_TAIL_SIGMAS: float = float(_LOADED_SETTINGS["pair_tail_sigmas"])

# Extra table entries appended beyond the tail width
PAIR_TAIL_PADDING: int = int(_LOADED_SETTINGS["pair_tail_padding"])

# Default random seed (None = fresh OS entropy)
DEFAULT_SEED: Optional[int] = _LOADED_SETTINGS["seed"]

# =============================================================================
# Kinematics
# =============================================================================

# Nucleon mass used for collision-energy conversions
NUCLEON_MASS_GEV: float = float(_LOADED_SETTINGS["nucleon_mass_gev"])
