"""
YAML → settings and preset exercise loader.

Loads settings from settings.yaml (bundled with the package) and merges user
overrides from ~/.lift-tracker/settings.yaml.  Preset exercise masters come
from presets/exercises.yaml, extended or overridden by
~/.lift-tracker/exercises.yaml.

Usage:
    from lift_tracker.io.config_loader import load_settings
    settings = load_settings()
    settings.llm.model

If a user file exists but cannot be parsed, a warning is issued and the file
is ignored.  Malformed preset entries are skipped with a warning.
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.config import ALL_MUSCLE_GROUPS
from ..core.models import ExerciseMaster, TargetMuscle

API_KEY_ENV_VAR = "GEMINI_API_KEY"


@dataclass
class LLMSettings:
    api_key: str | None = None
    model: str = "gemini-2.0-flash"
    temperature: float = 0.7
    plan_max_tokens: int = 2048
    evaluation_max_tokens: int = 1024
    history_logs: int = 7
    timeout_seconds: float = 60.0
    max_retries: int = 3


@dataclass
class Settings:
    llm: LLMSettings = field(default_factory=LLMSettings)
    user_profile: str | None = None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; a non-mapping document yields {}."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _load_user_yaml(path: Path) -> dict[str, Any]:
    """Load a user override file, warning and returning {} if it is broken."""
    try:
        return _load_yaml_file(path)
    except (OSError, yaml.YAMLError) as e:
        warnings.warn(f"Ignoring {path}: {e}", stacklevel=3)
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _bundled_path(*parts: str) -> Path:
    return Path(__file__).parent.parent.joinpath(*parts)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_user_config_dir() -> Path:
    """Return ~/.lift-tracker (whether or not it exists)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / ".lift-tracker"


def load_raw_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_tracker/settings.yaml
    2. User override at <config_dir>/settings.yaml

    Args:
        config_dir: Directory holding user overrides (default: ~/.lift-tracker)

    Returns:
        Merged dict of settings sections
    """
    config = _load_yaml_file(_bundled_path("settings.yaml"))

    user = (config_dir or get_user_config_dir()) / "settings.yaml"
    if user.exists():
        config = _deep_merge(config, _load_user_yaml(user))

    return config


def load_settings(config_dir: Path | None = None) -> Settings:
    """
    Load typed settings.

    The GEMINI_API_KEY environment variable overrides llm.api_key.
    """
    raw = load_raw_settings(config_dir)
    llm_raw = raw.get("llm") or {}
    defaults = LLMSettings()

    llm = LLMSettings(
        api_key=llm_raw.get("api_key") or None,
        model=str(llm_raw.get("model") or defaults.model),
        temperature=float(llm_raw.get("temperature", defaults.temperature)),
        plan_max_tokens=int(llm_raw.get("plan_max_tokens", defaults.plan_max_tokens)),
        evaluation_max_tokens=int(
            llm_raw.get("evaluation_max_tokens", defaults.evaluation_max_tokens)
        ),
        history_logs=int(llm_raw.get("history_logs", defaults.history_logs)),
        timeout_seconds=float(llm_raw.get("timeout_seconds", defaults.timeout_seconds)),
        max_retries=int(llm_raw.get("max_retries", defaults.max_retries)),
    )

    env_key = os.environ.get(API_KEY_ENV_VAR)
    if env_key:
        llm.api_key = env_key

    profile = raw.get("user_profile")
    return Settings(llm=llm, user_profile=str(profile).strip() if profile else None)


def _entry_to_master(entry: dict[str, Any]) -> ExerciseMaster:
    """Convert one preset entry, raising ValueError when it is malformed."""
    if not isinstance(entry, dict) or not entry.get("name"):
        raise ValueError("entry needs a 'name'")

    targets: list[TargetMuscle] = []
    for key, is_main in (("main", True), ("sub", False)):
        for muscle in entry.get(key) or []:
            if muscle not in ALL_MUSCLE_GROUPS:
                raise ValueError(f"unknown muscle group {muscle!r}")
            targets.append(TargetMuscle(muscle=muscle, is_main=is_main))

    return ExerciseMaster(
        name=str(entry["name"]),
        is_bodyweight=bool(entry.get("bodyweight", False)),
        is_cardio=bool(entry.get("cardio", False)),
        target_muscles=targets,
    )


def load_preset_exercises(config_dir: Path | None = None) -> list[ExerciseMaster]:
    """
    Load preset exercise masters.

    User entries replace bundled entries with the same name; new names are
    appended in file order.

    Args:
        config_dir: Directory holding user overrides (default: ~/.lift-tracker)

    Returns:
        Preset masters without ids or timestamps
    """
    entries: list[Any] = list(
        _load_yaml_file(_bundled_path("presets", "exercises.yaml")).get("exercises") or []
    )

    user = (config_dir or get_user_config_dir()) / "exercises.yaml"
    if user.exists():
        entries.extend(_load_user_yaml(user).get("exercises") or [])

    presets: dict[str, ExerciseMaster] = {}
    for i, entry in enumerate(entries):
        try:
            master = _entry_to_master(entry)
        except ValueError as e:
            warnings.warn(f"Skipping preset exercise #{i + 1}: {e}", stacklevel=2)
            continue
        presets[master.name] = master

    return list(presets.values())
