# ecg_engine/constants.py
import os
from typing import Dict, Tuple

# --- Lead Layout ---
LEAD_NAMES: Tuple[str, ...] = (
    "I", "II", "III", "aVR", "aVL", "aVF",
    "V1", "V2", "V3", "V4", "V5", "V6",
)
WILDCARD_LEAD = "*"
REFERENCE_LEAD = "II"

# --- Pulse Shape Constants ---
# Width-to-sigma divisors. These set how wide each gaussian looks on the strip
# and must stay fixed for output compatibility with recorded rhythms.
P_WAVE_SIGMA_DIVISOR = 2.5
QRS_SIGMA_DIVISOR = 4.5
T_WAVE_SIGMA_DIVISOR = 3.0
MIN_PULSE_WIDTH_SEC = 1e-9

# Pulse centres relative to QRS onset (seconds). Not rate dependent.
P_WAVE_OFFSET_SEC = -0.20
QRS_OFFSET_SEC = 0.0
T_WAVE_OFFSET_SEC = 0.25

# --- Rate / Loop Limits ---
MIN_BPM = 20.0
MAX_BPM = 300.0
MIN_LOOP_SEC = 0.25

# --- Noise Model ---
WANDER_FREQUENCY_HZ = 0.08

# Jitter hash. Part of the output contract: any implementation using these
# constants reproduces the same jitter sequence for a (sample index, lead).
FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193
SAMPLE_INDEX_MULTIPLIER = 0x9E3779B1
FMIX32_C1 = 0x85EBCA6B
FMIX32_C2 = 0xC2B2AE35
UINT32_MASK = 0xFFFFFFFF
UINT32_RANGE = 2.0 ** 32

# --- Lead Template ---
TEMPLATE_SCALE_RANGE = (0.1, 3.0)
TEMPLATE_OFFSET_RANGE = (-1.0, 1.0)

# Approximate clinical polarity. aVR looks at the heart from the right
# shoulder, so it is the one inverted lead; II is the reference at unit gain.
DEFAULT_LEAD_TEMPLATE: Dict[str, Dict[str, float]] = {
    "I":   {"scale": 0.8, "invert": False, "offset": 0.0},
    "II":  {"scale": 1.0, "invert": False, "offset": 0.0},
    "III": {"scale": 0.9, "invert": False, "offset": 0.0},
    "aVR": {"scale": 0.9, "invert": True,  "offset": 0.0},
    "aVL": {"scale": 0.8, "invert": False, "offset": 0.0},
    "aVF": {"scale": 0.9, "invert": False, "offset": 0.0},
    "V1":  {"scale": 0.8, "invert": False, "offset": 0.0},
    "V2":  {"scale": 1.0, "invert": False, "offset": 0.0},
    "V3":  {"scale": 1.1, "invert": False, "offset": 0.0},
    "V4":  {"scale": 1.2, "invert": False, "offset": 0.0},
    "V5":  {"scale": 1.1, "invert": False, "offset": 0.0},
    "V6":  {"scale": 1.0, "invert": False, "offset": 0.0},
}

# --- Sample Count ---
# Guards floor(seconds * fs) against products like 4.35 * 100 = 434.99999...
SAMPLE_COUNT_EPSILON = 1e-9

# --- Streaming Service Settings ---
DEFAULT_CHUNK_SEC = float(os.environ.get("ECG_ENGINE_CHUNK_SEC", "0.25"))
MAX_REQUEST_SEC = float(os.environ.get("ECG_ENGINE_MAX_REQUEST_SEC", "30"))
MAX_SESSIONS = int(os.environ.get("ECG_ENGINE_MAX_SESSIONS", "256"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "ECG_ENGINE_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]
LOG_LEVEL = os.environ.get("ECG_ENGINE_LOG_LEVEL", "INFO").upper()
