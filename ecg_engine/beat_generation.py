# ecg_engine/beat_generation.py
import numpy as np

from .api_models import ParametricParams, PulseType, QrsShape
from .constants import (
    MAX_BPM, MIN_BPM, P_WAVE_OFFSET_SEC, QRS_OFFSET_SEC, T_WAVE_OFFSET_SEC
)
from .waveform_primitives import gaussian_wave, triangle_wave, width_to_sigma


def clamp_bpm(bpm: float) -> float:
    return max(MIN_BPM, min(MAX_BPM, bpm))


def beat_phase(t_abs: np.ndarray, beat_period_sec: float) -> np.ndarray:
    """Time since the current beat's QRS onset; QRS onsets sit at multiples of the beat period."""
    beat_index = np.floor(t_abs / beat_period_sec)
    return t_abs - beat_index * beat_period_sec


def qrs_pulse(offset: np.ndarray, params: ParametricParams) -> np.ndarray:
    qrs = params.qrs
    if qrs.shape is QrsShape.TRIANGLE:
        return triangle_wave(offset, qrs.amp, qrs.width_ms / 1000.0)
    if qrs.shape is QrsShape.GAUSS:
        return gaussian_wave(offset, qrs.amp, width_to_sigma(qrs.width_ms, PulseType.QRS))
    raise ValueError(f"Unsupported QRS shape: {qrs.shape!r}")


def generate_parametric_base(t_abs: np.ndarray, params: ParametricParams) -> np.ndarray:
    """
    Base (lead-independent) signal for a fixed-rate PQRST rhythm.

    Each sample is drawn from its own beat only: a P gaussian centred 0.20 s
    before QRS onset, the QRS at onset and a T gaussian 0.25 s after it, all
    evaluated at the beat phase. The offsets are fixed and do not scale with
    rate. Pulses from neighbouring beats are not added.

    Args:
        t_abs: Absolute sample times (seconds since engine reset)
        params: Parametric block of the rhythm spec

    Returns:
        np.ndarray of base values, same length as t_abs
    """
    t_abs = np.asarray(t_abs, dtype=np.float64)
    beat_period_sec = 60.0 / clamp_bpm(params.bpm)
    phase = beat_phase(t_abs, beat_period_sec)

    p_wave = params.p_wave
    draw_p = p_wave is not None and p_wave.present
    p_sigma = width_to_sigma(p_wave.width_ms, PulseType.P) if draw_p else 0.0
    t_sigma = width_to_sigma(params.t_wave.width_ms, PulseType.T)

    base_signal = qrs_pulse(phase - QRS_OFFSET_SEC, params)
    base_signal += gaussian_wave(phase - T_WAVE_OFFSET_SEC, params.t_wave.amp, t_sigma)
    if draw_p:
        base_signal += gaussian_wave(phase - P_WAVE_OFFSET_SEC, p_wave.amp, p_sigma)
    return base_signal
