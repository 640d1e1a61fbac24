"""
Default solve parameters, persisted as JSON.

Data is stored in ``<project>/data/nlsolver.json``.  Unknown keys are
dropped and missing keys fall back to :data:`DEFAULT_SETTINGS`.
"""

import json
import os

_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data")
_DATA_FILE = os.path.join(_DATA_DIR, "nlsolver.json")

DEFAULT_SETTINGS = {
    "epsilon": 1e-6,
    "method": "newton",          # "newton" or "secant"
    "max_iterations": 1000,
    "timeout_seconds": 120.0,    # wall-clock deadline for background solves
    "update_period": 5,          # reporting-only, see nlsolver.complexity
}


def _ensure_dir() -> None:
    os.makedirs(_DATA_DIR, exist_ok=True)


def _load() -> dict:
    if os.path.exists(_DATA_FILE):
        try:
            with open(_DATA_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
        except (json.JSONDecodeError, OSError):
            pass
    return {}


def get_settings() -> dict:
    """Return the stored settings merged over the defaults."""
    merged = dict(DEFAULT_SETTINGS)
    merged.update({k: v for k, v in _load().items() if k in DEFAULT_SETTINGS})
    return merged


def save_settings(settings: dict) -> None:
    """Persist *settings* (unknown keys are ignored)."""
    current = get_settings()
    current.update({k: v for k, v in settings.items() if k in DEFAULT_SETTINGS})
    _ensure_dir()
    with open(_DATA_FILE, "w", encoding="utf-8") as f:
        json.dump(current, f, indent=2, ensure_ascii=False)


def reset_settings() -> None:
    """Remove the stored file so defaults apply again."""
    if os.path.exists(_DATA_FILE):
        os.remove(_DATA_FILE)
