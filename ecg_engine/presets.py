# ecg_engine/presets.py
import copy
import logging
from typing import Any, Dict, List

from .api_models import RhythmSpec
from .engine import check_generator_consistency, coerce_rhythm_spec

logger = logging.getLogger(__name__)

# --- Built-in Rhythm Definitions ---
# Stored in the rhythm-file JSON layout (camelCase keys). Authoring-only keys
# such as quiz answers and display hints are accepted and ignored by the engine.
NSR_80 = {
    "schema": "com.mama.rhythm/1",
    "id": "nsr_80",
    "title": "NSR 80",
    "mode": "parametric",
    "paperSpeed": 25,
    "gain": 10,
    "display": {"layout": "12", "defaultLead": "II"},
    "quiz": {
        "rate": "60-100", "regularity": "Regular", "p": "Present",
        "pr": "0.12-0.20", "qrs": "Narrow (<0.12)", "name": "NSR",
        "action": "No_Shock_Asystole",
    },
    "generator": {
        "sampleRateHz": 240,
        "durationSec": 10,
        "noise": {"baselineJitter": 0.005, "wander": 0.02},
        "parametric": {
            "bpm": 80,
            "pWave": {"present": True, "amp": 0.3, "widthMs": 90},
            "qrs": {"widthMs": 80, "amp": 2.0, "shape": "triangle"},
            "tWave": {"amp": 0.6, "widthMs": 140},
        },
        "leads": {"derivation": "template12"},
    },
}

SINUS_BRADY_45 = {
    "id": "sinus_brady_45",
    "title": "Sinus Bradycardia 45",
    "mode": "parametric",
    "generator": {
        "sampleRateHz": 240,
        "noise": {"baselineJitter": 0.005, "wander": 0.03},
        "parametric": {
            "bpm": 45,
            "pWave": {"present": True, "amp": 0.25, "widthMs": 100},
            "qrs": {"widthMs": 90, "amp": 1.8, "shape": "gauss"},
            "tWave": {"amp": 0.5, "widthMs": 160},
        },
        "leads": {"derivation": "template12"},
    },
}

SINUS_TACH_130 = {
    "id": "sinus_tach_130",
    "title": "Sinus Tachycardia 130",
    "mode": "parametric",
    "generator": {
        "sampleRateHz": 250,
        "noise": {"baselineJitter": 0.008},
        "parametric": {
            "bpm": 130,
            "pWave": {"present": True, "amp": 0.2, "widthMs": 80},
            "qrs": {"widthMs": 80, "amp": 1.9, "shape": "gauss"},
            "tWave": {"amp": 0.45, "widthMs": 120},
        },
        "leads": {"derivation": "template12"},
    },
}

WIDE_COMPLEX_TACH_170 = {
    "id": "wide_complex_tach_170",
    "title": "Wide Complex Tachycardia 170",
    "mode": "parametric",
    "generator": {
        "sampleRateHz": 250,
        "noise": {"baselineJitter": 0.01, "wander": 0.02},
        "parametric": {
            "bpm": 170,
            "pWave": {"present": False},
            "qrs": {"widthMs": 160, "amp": 2.5, "shape": "gauss"},
            "tWave": {"amp": 0.7, "widthMs": 180},
        },
        "leads": {
            "derivation": "template12",
            "template": {"V1": {"invert": True}, "V2": {"invert": True}},
        },
    },
}

TIMELINE_ECTOPY = {
    "id": "timeline_ectopy",
    "title": "Sinus beat with wide ectopic (2 s loop)",
    "mode": "timeline",
    "generator": {
        "sampleRateHz": 240,
        "noise": {"baselineJitter": 0.004},
        "timeline": {
            "loopSec": 2.0,
            "events": [
                {"t": 0.30, "lead": "*", "type": "P", "amp": 0.25, "widthMs": 90},
                {"t": 0.50, "lead": "*", "type": "QRS", "amp": 1.8, "widthMs": 90},
                {"t": 0.80, "lead": "*", "type": "T", "amp": 0.4, "widthMs": 160},
                {"t": 1.30, "lead": "*", "type": "QRS", "amp": 2.2, "widthMs": 160},
                {"t": 0.50, "lead": "V1", "type": "ARTIFACT", "amp": 0.6, "widthMs": 40},
            ],
        },
        "leads": {"derivation": "template12"},
    },
}

PRESETS: Dict[str, Dict[str, Any]] = {
    preset["id"]: preset
    for preset in (NSR_80, SINUS_BRADY_45, SINUS_TACH_130, WIDE_COMPLEX_TACH_170, TIMELINE_ECTOPY)
}


def list_presets() -> List[Dict[str, str]]:
    return [{"id": preset_id, "title": preset["title"]} for preset_id, preset in PRESETS.items()]


def get_preset_document(preset_id: str) -> Dict[str, Any]:
    """Raw rhythm document for a preset (a copy; safe to edit)."""
    if preset_id not in PRESETS:
        raise KeyError(f"Unknown rhythm preset: {preset_id}")
    return copy.deepcopy(PRESETS[preset_id])


def get_preset(preset_id: str) -> RhythmSpec:
    spec = coerce_rhythm_spec(get_preset_document(preset_id))
    check_generator_consistency(spec)
    logger.debug("Resolved preset %s", preset_id)
    return spec
