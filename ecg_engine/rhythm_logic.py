# ecg_engine/rhythm_logic.py
import numpy as np
from collections import defaultdict
from typing import Dict, List

from .api_models import RhythmMode, RhythmSpec, TimelineEvent, TimelineParams
from .beat_generation import clamp_bpm
from .constants import LEAD_NAMES, MIN_LOOP_SEC, WILDCARD_LEAD
from .waveform_primitives import gaussian_wave, width_to_sigma

WIDE_QRS_MS = 120.0


def effective_loop_sec(params: TimelineParams) -> float:
    return max(MIN_LOOP_SEC, params.loop_sec)


def circular_distance(t_loop, t_event: float, loop_sec: float) -> np.ndarray:
    """
    Shorter of the two arc distances between t_loop and t_event on a loop of loop_sec.

    Both arguments are expected in [0, loop_sec). Works for any loop length,
    unlike the 'd > 0.5 -> 1 - d' shortcut which only holds for 1 s loops.
    """
    d = np.abs(np.asarray(t_loop, dtype=np.float64) - t_event)
    return np.minimum(d, loop_sec - d)


def partition_events_by_lead(events) -> Dict[str, List[TimelineEvent]]:
    by_lead: Dict[str, List[TimelineEvent]] = defaultdict(list)
    for event in events:
        by_lead[event.lead].append(event)
    return by_lead


def _sum_event_pulses(t_loop: np.ndarray, events: List[TimelineEvent], loop_sec: float) -> np.ndarray:
    total = np.zeros_like(t_loop)
    for event in events:
        event_phase = event.t % loop_sec
        distance = circular_distance(t_loop, event_phase, loop_sec)
        total += gaussian_wave(distance, event.amp, width_to_sigma(event.width_ms, event.kind))
    return total


def generate_timeline_base(t_abs: np.ndarray, params: TimelineParams) -> Dict[str, np.ndarray]:
    """
    Per-lead base signals for a looped event timeline.

    Wildcard ('*') events are summed once and shared by every lead; events
    aimed at a single lead are added on top for that lead only. Leads with no
    events of their own share the wildcard array, so callers must not modify
    the returned arrays in place.

    Args:
        t_abs: Absolute sample times (seconds since engine reset)
        params: Timeline block of the rhythm spec

    Returns:
        Dict of lead name -> base signal array, for all twelve leads
    """
    t_abs = np.asarray(t_abs, dtype=np.float64)
    loop_sec = effective_loop_sec(params)
    t_loop = np.mod(t_abs, loop_sec)

    by_lead = partition_events_by_lead(params.events)
    shared = _sum_event_pulses(t_loop, by_lead.get(WILDCARD_LEAD, []), loop_sec)

    lead_signals: Dict[str, np.ndarray] = {}
    for lead_name in LEAD_NAMES:
        own_events = by_lead.get(lead_name)
        if own_events:
            lead_signals[lead_name] = shared + _sum_event_pulses(t_loop, own_events, loop_sec)
        else:
            lead_signals[lead_name] = shared
    return lead_signals


# --- Rhythm Description ---
def describe_rhythm(spec: RhythmSpec) -> str:
    generator = spec.generator
    if spec.mode is RhythmMode.PARAMETRIC and generator.parametric is not None:
        params = generator.parametric
        bpm = clamp_bpm(params.bpm)
        has_p = params.p_wave is not None and params.p_wave.present
        width = "wide" if params.qrs.width_ms >= WIDE_QRS_MS else "narrow"
        description = (
            f"Parametric rhythm at {bpm:g}bpm {'with' if has_p else 'without'} P waves, "
            f"{width} {params.qrs.shape.value} QRS ({params.qrs.width_ms:g}ms)"
        )
    elif spec.mode is RhythmMode.TIMELINE and generator.timeline is not None:
        params = generator.timeline
        lead_specific = sum(1 for event in params.events if event.lead != WILDCARD_LEAD)
        description = (
            f"Timeline rhythm looping every {effective_loop_sec(params):g}s "
            f"with {len(params.events)} events"
        )
        if lead_specific:
            description += f" ({lead_specific} lead-specific)"
    else:
        description = f"{spec.mode.value.capitalize()} rhythm (no generator block)"

    noise = generator.noise
    if noise is not None and (noise.baseline_jitter or noise.wander):
        description += " with baseline noise"
    return description
