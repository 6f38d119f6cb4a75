# ecg_engine/noise.py
import numpy as np
from typing import Optional

from .constants import (
    FNV32_OFFSET_BASIS, FNV32_PRIME, SAMPLE_INDEX_MULTIPLIER,
    FMIX32_C1, FMIX32_C2, UINT32_MASK, UINT32_RANGE, WANDER_FREQUENCY_HZ
)


def lead_hash(lead_name: str) -> int:
    """FNV-1a (32 bit) over the ASCII lead name."""
    h = FNV32_OFFSET_BASIS
    for byte in lead_name.encode("ascii"):
        h ^= byte
        h = (h * FNV32_PRIME) & UINT32_MASK
    return h


def hash_to_unit(h) -> np.ndarray:
    """Centre each 32-bit hash in its bucket: (h + 0.5) / 2**32, strictly inside (0, 1)."""
    return (np.asarray(h, dtype=np.float64) + 0.5) / UINT32_RANGE


def hash_unit_interval(sample_indices, lead_name: str) -> np.ndarray:
    """
    Seed-free hash of (sample index, lead) onto (0, 1).

    key = lead_hash(lead) XOR (sample_index * 0x9E3779B1 mod 2**32), then the
    murmur3 fmix32 finaliser, then hash_to_unit. Sample indices are taken mod 2**32.

    Args:
        sample_indices: Absolute sample indices since the last load/reset
        lead_name: Lead the jitter belongs to

    Returns:
        float64 array in (0, 1), one value per index
    """
    idx = np.asarray(sample_indices, dtype=np.uint64) & np.uint64(UINT32_MASK)
    # uint64 holds every 32x32 bit product, so masking after each multiply keeps it exact.
    h = (idx * np.uint64(SAMPLE_INDEX_MULTIPLIER)) & np.uint64(UINT32_MASK)
    h ^= np.uint64(lead_hash(lead_name))
    h ^= h >> np.uint64(16)
    h = (h * np.uint64(FMIX32_C1)) & np.uint64(UINT32_MASK)
    h ^= h >> np.uint64(13)
    h = (h * np.uint64(FMIX32_C2)) & np.uint64(UINT32_MASK)
    h ^= h >> np.uint64(16)
    return hash_to_unit(h)


def jitter(sample_indices, lead_name: str, amplitude: Optional[float]) -> np.ndarray:
    """Per-lead jitter in (-amplitude, +amplitude); zeros when amplitude is unset or zero."""
    sample_indices = np.asarray(sample_indices)
    if not amplitude:
        return np.zeros(sample_indices.shape, dtype=np.float64)
    u = hash_unit_interval(sample_indices, lead_name)
    return amplitude * (2.0 * u - 1.0)


def baseline_wander(t_abs, amplitude: Optional[float]) -> np.ndarray:
    """Slow drift shared by all leads: amplitude * sin(2*pi*0.08Hz*t)."""
    t_abs = np.asarray(t_abs, dtype=np.float64)
    if not amplitude:
        return np.zeros_like(t_abs)
    return amplitude * np.sin(2 * np.pi * WANDER_FREQUENCY_HZ * t_abs)
