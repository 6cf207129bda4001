"""Cycle and pregnancy tracking for CycleCare.

Projections are pure functions of the stored profile and a reference day;
they are recomputed on every read and never persisted.

Modules:
    date_math           — Calendar-day arithmetic and display formatting
    config_loader       — Load/validate/hot-reload tracking_config.yaml
    cycle_projector     — Period, ovulation and fertile-window forecast
    pregnancy_projector — Gestational week/day from a due date
    symptom_log         — Upsert of daily entries into the profile's log
    guidance            — Symptom remedies, craving swaps, nutrition tips
    share_summary       — Plain-text summary for manual sharing
"""

from src.tracking.config_loader import TrackingConfig, get_tracking_config
from src.tracking.cycle_projector import CycleProjection, CycleProjector
from src.tracking.pregnancy_projector import PregnancyProjection, PregnancyProjector
from src.tracking.symptom_log import SaveResult, SaveStatus, SymptomLogStore

__all__ = [
    "CycleProjector",
    "CycleProjection",
    "PregnancyProjector",
    "PregnancyProjection",
    "SymptomLogStore",
    "SaveResult",
    "SaveStatus",
    "TrackingConfig",
    "get_tracking_config",
]
