"""
Pytest configuration and shared fixtures for ECG rhythm engine tests.
"""
import copy
import pytest
from ecg_engine.api_models import RhythmSpec
from ecg_engine.engine import RhythmEngine
from ecg_engine.presets import NSR_80, TIMELINE_ECTOPY

@pytest.fixture
def nsr_document():
    """Normal sinus rhythm at 80 bpm in rhythm-file (camelCase) form."""
    return copy.deepcopy(NSR_80)

@pytest.fixture
def parametric_spec(nsr_document):
    """Parametric NSR 80, triangle QRS, 240 Hz, light jitter and wander."""
    return RhythmSpec.model_validate(nsr_document)

@pytest.fixture
def quiet_parametric_spec(nsr_document):
    """Same rhythm as parametric_spec with noise switched off."""
    nsr_document["generator"].pop("noise")
    return RhythmSpec.model_validate(nsr_document)

@pytest.fixture
def timeline_spec():
    """2 s looped timeline with five events, one of them aimed at V1 only."""
    return RhythmSpec.model_validate(copy.deepcopy(TIMELINE_ECTOPY))

@pytest.fixture
def single_qrs_timeline_spec():
    """Noise-free 2 s loop holding a single QRS of amplitude 2.2 at 1.00 s."""
    return RhythmSpec.model_validate({
        "id": "single_qrs",
        "mode": "timeline",
        "generator": {
            "sampleRateHz": 240,
            "timeline": {
                "loopSec": 2.0,
                "events": [{"t": 1.0, "lead": "*", "type": "QRS", "amp": 2.2, "widthMs": 100}],
            },
            "leads": {"derivation": "template12"},
        },
    })

@pytest.fixture
def mismatched_spec_document(nsr_document):
    """Timeline mode declared, but only a parametric block supplied."""
    nsr_document["mode"] = "timeline"
    return nsr_document

@pytest.fixture
def engine(parametric_spec):
    """Engine with NSR 80 loaded and the cursor at 0."""
    return RhythmEngine(parametric_spec)

@pytest.fixture
def tolerance_config():
    """Standard tolerance values for numerical comparisons."""
    return {
        'time_tolerance_sec': 1e-9,
        'amplitude_tolerance_mv': 1e-4,
        'float32_tolerance': 1e-5,
        'peak_timing_tolerance_sec': 0.005,  # a little over one sample at 240 Hz
    }
