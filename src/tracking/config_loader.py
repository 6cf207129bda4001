"""Load, validate, and hot-reload the CycleCare tracking configuration.

The config lives in ``tracking_config.yaml`` alongside this module.  At
startup it is loaded once and cached.  Call ``reload_tracking_config()`` to
re-read from disk after an edit — no restart required.

Usage::

    from src.tracking.config_loader import get_tracking_config

    config = get_tracking_config()
    config.cycle.luteal_phase_days        # 14
    config.pregnancy.full_term_days       # 280
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("cyclecare.tracking.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "tracking_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class CycleConfig:
    """Menstrual cycle projection constants."""

    luteal_phase_days: int = 14
    fertile_days_before_ovulation: int = 5
    high_fertility_days: int = 3
    medium_fertility_days: int = 3


@dataclass
class Milestone:
    """A weekly pregnancy note."""

    title: str
    content: str


@dataclass
class PregnancyConfig:
    """Pregnancy projection constants."""

    full_term_days: int = 280
    weekly_milestones: dict[int, Milestone] = field(default_factory=dict)
    default_milestone: Milestone = field(
        default_factory=lambda: Milestone(title="", content="")
    )

    def milestone_for(self, week: int) -> Milestone:
        """Return the milestone for ``week``, else the next one ahead, else the default."""
        if week in self.weekly_milestones:
            return self.weekly_milestones[week]
        ahead = [w for w in sorted(self.weekly_milestones) if w > week]
        if ahead:
            return self.weekly_milestones[ahead[0]]
        return self.default_milestone


@dataclass
class TrackingConfig:
    """Complete, validated tracking configuration.

    Attributes:
        version:   Config schema version string.
        cycle:     Menstrual cycle projection constants.
        pregnancy: Pregnancy projection constants.
    """

    version: str
    cycle: CycleConfig
    pregnancy: PregnancyConfig


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when tracking_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Tracking config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> TrackingConfig:
    """Validate the raw YAML dict and construct a TrackingConfig.

    Applies defaults for optional fields and collects every problem before
    raising, so one run reports all of them.

    Raises:
        ConfigValidationError: If a value is missing, non-numeric or out of range.
    """
    errors: list[str] = []

    def _positive_int(d: dict, key: str, section: str, default: int) -> int:
        value: Any = d.get(key, default)
        try:
            number = int(value)
        except (TypeError, ValueError):
            errors.append(f"{section}.{key} must be an integer, got {value!r}")
            return default
        if number <= 0:
            errors.append(f"{section}.{key} must be positive, got {number}")
        return number

    version = str(raw.get("version", "1.0"))

    # ── Menstrual cycle ──
    mc_raw = raw.get("menstrual_cycle") or {}
    fw_raw = mc_raw.get("fertile_window") or {}
    fl_raw = mc_raw.get("fertility_levels") or {}
    cycle = CycleConfig(
        luteal_phase_days=_positive_int(mc_raw, "luteal_phase_days", "menstrual_cycle", 14),
        fertile_days_before_ovulation=_positive_int(
            fw_raw, "days_before_ovulation", "menstrual_cycle.fertile_window", 5
        ),
        high_fertility_days=_positive_int(
            fl_raw, "high_days", "menstrual_cycle.fertility_levels", 3
        ),
        medium_fertility_days=_positive_int(
            fl_raw, "medium_days", "menstrual_cycle.fertility_levels", 3
        ),
    )

    # ── Pregnancy ──
    pg_raw = raw.get("pregnancy") or {}
    milestones: dict[int, Milestone] = {}
    for week, cfg in (pg_raw.get("weekly_milestones") or {}).items():
        if not isinstance(cfg, dict) or "title" not in cfg or "content" not in cfg:
            errors.append(f"pregnancy.weekly_milestones.{week} needs 'title' and 'content'")
            continue
        try:
            milestones[int(week)] = Milestone(title=str(cfg["title"]), content=str(cfg["content"]))
        except (TypeError, ValueError):
            errors.append(f"pregnancy.weekly_milestones key {week!r} must be a week number")

    default_raw = pg_raw.get("default_milestone") or {}
    pregnancy = PregnancyConfig(
        full_term_days=_positive_int(pg_raw, "full_term_days", "pregnancy", 280),
        weekly_milestones=milestones,
        default_milestone=Milestone(
            title=str(default_raw.get("title", "Growing every day!")),
            content=str(default_raw.get("content", "")),
        ),
    )

    if errors:
        raise ConfigValidationError(
            f"tracking_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return TrackingConfig(version=version, cycle=cycle, pregnancy=pregnancy)


def load_tracking_config(path: Path | None = None) -> TrackingConfig:
    """Load and validate the tracking config from disk.

    Args:
        path: Override path to YAML. Uses the bundled tracking_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded tracking config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: TrackingConfig | None = None
_config_lock = threading.Lock()


def get_tracking_config() -> TrackingConfig:
    """Return the global TrackingConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_tracking_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_tracking_config()
    return _config


def reload_tracking_config(path: Path | None = None) -> TrackingConfig:
    """Reload the tracking config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_tracking_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded tracking config: %s → %s", old_version, new_config.version)
    return new_config
