# ecg_engine/full_ecg/lead_template.py
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..constants import (
    DEFAULT_LEAD_TEMPLATE, LEAD_NAMES, TEMPLATE_OFFSET_RANGE, TEMPLATE_SCALE_RANGE
)

# Each of the twelve leads is a linear view of the same synthesized base signal:
#   lead = (-1 if invert else 1) * base * scale + offset + jitter


@dataclass(frozen=True)
class LeadTransform:
    scale: float
    invert: bool
    offset: float

    @property
    def gain(self) -> float:
        return -self.scale if self.invert else self.scale


def _clamp(value: float, bounds) -> float:
    low, high = bounds
    return max(low, min(high, value))


def _entry_value(entry: Any, field: str):
    if entry is None:
        return None
    if isinstance(entry, Mapping):
        return entry.get(field)
    return getattr(entry, field, None)


def resolve_lead_template(template: Optional[Mapping[str, Any]] = None) -> Dict[str, LeadTransform]:
    """
    Merge a (partial) per-lead template over the built-in defaults.

    Fields a lead entry leaves out keep their default. Scale is clamped to
    [0.1, 3] and offset to [-1, 1].

    Args:
        template: Mapping of lead name -> LeadTemplateEntry or dict with
                  optional 'scale', 'invert', 'offset'. Unknown lead names raise ValueError.

    Returns:
        Dict of all twelve leads -> LeadTransform, in standard lead order
    """
    template = template or {}
    unknown = set(template) - set(LEAD_NAMES)
    if unknown:
        raise ValueError(f"Unknown lead(s) in template: {sorted(unknown)}")

    resolved: Dict[str, LeadTransform] = {}
    for lead_name in LEAD_NAMES:
        default = DEFAULT_LEAD_TEMPLATE[lead_name]
        entry = template.get(lead_name)
        scale = _entry_value(entry, "scale")
        invert = _entry_value(entry, "invert")
        offset = _entry_value(entry, "offset")
        resolved[lead_name] = LeadTransform(
            scale=_clamp(default["scale"] if scale is None else float(scale), TEMPLATE_SCALE_RANGE),
            invert=default["invert"] if invert is None else bool(invert),
            offset=_clamp(default["offset"] if offset is None else float(offset), TEMPLATE_OFFSET_RANGE),
        )
    return resolved


def apply_lead_transform(base_signal: np.ndarray, transform: LeadTransform, noise: Optional[np.ndarray] = None) -> np.ndarray:
    lead_signal = base_signal * transform.gain + transform.offset
    if noise is not None:
        lead_signal = lead_signal + noise
    return lead_signal
