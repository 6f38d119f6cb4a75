# ecg_engine/engine.py
import logging
import math
import numpy as np
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from .api_models import GeneratorConfig, RhythmMode, RhythmSpec
from .beat_generation import generate_parametric_base
from .constants import LEAD_NAMES, SAMPLE_COUNT_EPSILON
from .errors import ConfigError, UsageError
from .full_ecg.lead_template import LeadTransform, apply_lead_transform, resolve_lead_template
from .noise import baseline_wander, jitter
from .rhythm_logic import generate_timeline_base

logger = logging.getLogger(__name__)


@dataclass
class SampleBuffer:
    """One chunk of 12-lead output. All leads share t_start, dt and length."""
    t_start: float
    dt: float
    data: Dict[str, np.ndarray]

    @property
    def n_samples(self) -> int:
        return len(next(iter(self.data.values()))) if self.data else 0

    def times(self) -> np.ndarray:
        return self.t_start + np.arange(self.n_samples) * self.dt

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tStart": self.t_start,
            "dt": self.dt,
            "data": {lead: values.tolist() for lead, values in self.data.items()},
        }


# --- Generator Dispatch ---
def _parametric_leads(t_abs: np.ndarray, generator: GeneratorConfig) -> Dict[str, np.ndarray]:
    base_signal = generate_parametric_base(t_abs, generator.parametric)
    return {lead_name: base_signal for lead_name in LEAD_NAMES}


def _timeline_leads(t_abs: np.ndarray, generator: GeneratorConfig) -> Dict[str, np.ndarray]:
    return generate_timeline_base(t_abs, generator.timeline)


LEAD_GENERATORS = {
    RhythmMode.PARAMETRIC: _parametric_leads,
    RhythmMode.TIMELINE: _timeline_leads,
}


def check_generator_consistency(spec: RhythmSpec) -> None:
    """Raise ConfigError unless the generator block matching spec.mode is present and complete."""
    generator = spec.generator
    if spec.mode is RhythmMode.PARAMETRIC:
        if generator.parametric is None:
            raise ConfigError("mode 'parametric' requires generator.parametric")
        p_wave = generator.parametric.p_wave
        if p_wave is not None and p_wave.present and (p_wave.amp is None or p_wave.width_ms is None):
            raise ConfigError("pWave.present requires both pWave.amp and pWave.widthMs")
    elif spec.mode is RhythmMode.TIMELINE:
        if generator.timeline is None:
            raise ConfigError("mode 'timeline' requires generator.timeline")
    else:
        raise ConfigError(f"Unsupported rhythm mode: {spec.mode!r}")


def coerce_rhythm_spec(spec: Union[RhythmSpec, Mapping[str, Any]]) -> RhythmSpec:
    if isinstance(spec, RhythmSpec):
        return spec
    if isinstance(spec, Mapping):
        try:
            return RhythmSpec.model_validate(spec)
        except ValidationError as e:
            raise ConfigError(f"Invalid rhythm spec: {e}") from e
    raise ConfigError(f"Expected a RhythmSpec or mapping, got {type(spec).__name__}")


class RhythmEngine:
    """
    Streams 12-lead samples for one loaded rhythm.

    Each instance owns its spec and time cursor, so several simulations can
    run side by side. Not safe for concurrent writers; give each caller its own engine.
    """

    def __init__(self, spec: Optional[Union[RhythmSpec, Mapping[str, Any]]] = None):
        self._spec: Optional[RhythmSpec] = None
        self._lead_transforms: Dict[str, LeadTransform] = {}
        self._sample_index = 0
        if spec is not None:
            self.load(spec)

    def __repr__(self):
        rhythm = self._spec.id if self._spec is not None else None
        return f"RhythmEngine(rhythm={rhythm!r}, t={self.t:.3f})"

    @property
    def spec(self) -> Optional[RhythmSpec]:
        return self._spec

    @property
    def is_loaded(self) -> bool:
        return self._spec is not None

    @property
    def sample_index(self) -> int:
        return self._sample_index

    @property
    def dt(self) -> Optional[float]:
        if self._spec is None:
            return None
        return 1.0 / self._spec.generator.sample_rate_hz

    @property
    def t(self) -> float:
        """Cursor position in seconds since the last load/reset."""
        dt = self.dt
        return self._sample_index * dt if dt is not None else 0.0

    def load(self, spec: Union[RhythmSpec, Mapping[str, Any]]) -> None:
        """Validate and install a rhythm spec, then rewind the cursor. State is untouched on failure."""
        try:
            parsed = coerce_rhythm_spec(spec)
            check_generator_consistency(parsed)
        except ConfigError as e:
            logger.warning("Rejected rhythm spec: %s", e)
            raise
        template = parsed.generator.leads.template
        self._lead_transforms = resolve_lead_template(template)
        self._spec = parsed
        self._sample_index = 0
        logger.debug(
            "Loaded rhythm %r (mode=%s, fs=%gHz)",
            parsed.id, parsed.mode.value, parsed.generator.sample_rate_hz,
        )

    def reset(self) -> None:
        self._sample_index = 0
        logger.debug("Engine cursor reset")

    def sample(self, seconds: float) -> SampleBuffer:
        """
        Generate the next `seconds` of signal and advance the cursor.

        Args:
            seconds: Requested duration; at least one sample is always produced

        Returns:
            SampleBuffer with N = max(1, floor(seconds * fs)) samples per lead

        Raises:
            UsageError: no rhythm loaded, or seconds is not finite
        """
        if self._spec is None:
            raise UsageError("No rhythm loaded; call load() before sample()")
        if not math.isfinite(seconds):
            raise UsageError(f"Sample duration must be finite, got {seconds!r}")

        generator = self._spec.generator
        dt = 1.0 / generator.sample_rate_hz
        num_samples = max(1, math.floor(seconds * generator.sample_rate_hz + SAMPLE_COUNT_EPSILON))
        sample_indices = np.arange(self._sample_index, self._sample_index + num_samples, dtype=np.int64)
        t_abs = sample_indices * dt
        t_start = self._sample_index * dt

        base_by_lead = LEAD_GENERATORS[self._spec.mode](t_abs, generator)
        noise = generator.noise
        wander = baseline_wander(t_abs, noise.wander if noise else None)
        jitter_amplitude = noise.baseline_jitter if noise else None

        data: Dict[str, np.ndarray] = {}
        for lead_name in LEAD_NAMES:
            lead_signal = apply_lead_transform(
                base_by_lead[lead_name] + wander,
                self._lead_transforms[lead_name],
                jitter(sample_indices, lead_name, jitter_amplitude),
            )
            data[lead_name] = lead_signal.astype(np.float32)

        self._sample_index += num_samples
        return SampleBuffer(t_start=t_start, dt=dt, data=data)
