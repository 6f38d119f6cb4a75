# ecg_engine/waveform_primitives.py
import numpy as np
from .api_models import PulseType
from .constants import (
    MIN_PULSE_WIDTH_SEC, P_WAVE_SIGMA_DIVISOR, QRS_SIGMA_DIVISOR, T_WAVE_SIGMA_DIVISOR
)

SIGMA_DIVISORS = {
    PulseType.P: P_WAVE_SIGMA_DIVISOR,
    PulseType.QRS: QRS_SIGMA_DIVISOR,
    PulseType.T: T_WAVE_SIGMA_DIVISOR,
    PulseType.ARTIFACT: QRS_SIGMA_DIVISOR,
}

# --- Waveform Primitives ---
def gaussian_wave(offset, amplitude, width_std_dev):
    offset = np.asarray(offset, dtype=np.float64)
    if width_std_dev <= MIN_PULSE_WIDTH_SEC: return np.zeros_like(offset)
    return amplitude * np.exp(-(offset**2) / (2 * width_std_dev**2))

def triangle_wave(offset, amplitude, width_sec):
    """
    Symmetric triangular pulse with its apex at offset 0.

    Args:
        offset: Time(s) relative to the pulse centre, in seconds
        amplitude: Apex value
        width_sec: Full base width; the pulse is zero beyond width/2 either side

    Returns:
        Pulse values, same shape as offset
    """
    offset = np.asarray(offset, dtype=np.float64)
    if width_sec <= MIN_PULSE_WIDTH_SEC: return np.zeros_like(offset)
    half_width = width_sec / 2.0
    return amplitude * np.maximum(0.0, 1.0 - np.abs(offset) / half_width)

def width_to_sigma(width_ms: float, pulse_type: PulseType) -> float:
    """Nominal pulse width in milliseconds -> gaussian sigma in seconds."""
    return (width_ms / 1000.0) / SIGMA_DIVISORS[pulse_type]
