# ecg_engine/api_models.py
from enum import Enum
from typing import Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LeadName = Literal["I", "II", "III", "aVR", "aVL", "aVF", "V1", "V2", "V3", "V4", "V5", "V6"]


class RhythmMode(str, Enum):
    PARAMETRIC = "parametric"
    TIMELINE = "timeline"


class QrsShape(str, Enum):
    TRIANGLE = "triangle"
    GAUSS = "gauss"


class PulseType(str, Enum):
    P = "P"
    QRS = "QRS"
    T = "T"
    ARTIFACT = "ARTIFACT"


class SpecModel(BaseModel):
    """Base for rhythm spec blocks: immutable, camelCase JSON keys accepted, unknown keys ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        allow_inf_nan=False,
        extra="ignore",
    )


class PWaveParams(SpecModel):
    present: bool = Field(..., description="Draw a P wave before each QRS.")
    amp: Optional[float] = Field(None, description="Peak amplitude (mV). Required when present.")
    width_ms: Optional[float] = Field(None, gt=0, description="Nominal width (ms). Required when present.")


class QrsParams(SpecModel):
    width_ms: float = Field(..., gt=0)
    amp: float
    shape: QrsShape


class TWaveParams(SpecModel):
    amp: float
    width_ms: float = Field(..., gt=0)


class ParametricParams(SpecModel):
    bpm: float = Field(..., description="Ventricular rate; clamped to 20-300 bpm when generating.")
    p_wave: Optional[PWaveParams] = None
    qrs: QrsParams
    t_wave: TWaveParams


class TimelineEvent(SpecModel):
    t: float = Field(..., ge=0, description="Offset within the loop (seconds).")
    lead: Union[LeadName, Literal["*"]] = Field(..., description="Target lead, or '*' for every lead.")
    kind: PulseType = Field(..., alias="type")
    amp: float
    width_ms: float = Field(..., gt=0)


class TimelineParams(SpecModel):
    loop_sec: float = Field(..., gt=0, description="Loop length; floored at 0.25 s when generating.")
    events: Tuple[TimelineEvent, ...] = ()


class NoiseConfig(SpecModel):
    baseline_jitter: Optional[float] = Field(None, ge=0, description="Per-sample, per-lead jitter amplitude (mV).")
    wander: Optional[float] = Field(None, ge=0, description="Shared 0.08 Hz baseline wander amplitude (mV).")


class LeadTemplateEntry(SpecModel):
    scale: Optional[float] = None
    invert: Optional[bool] = None
    offset: Optional[float] = None


class LeadsConfig(SpecModel):
    derivation: Literal["template12"] = "template12"
    template: Optional[Dict[LeadName, LeadTemplateEntry]] = None


class GeneratorConfig(SpecModel):
    sample_rate_hz: float = Field(..., gt=0)
    duration_sec: Optional[float] = Field(None, gt=0, description="Authoring hint only; the engine streams indefinitely.")
    noise: Optional[NoiseConfig] = None
    parametric: Optional[ParametricParams] = None
    timeline: Optional[TimelineParams] = None
    leads: LeadsConfig = Field(default_factory=LeadsConfig)


class RhythmSpec(SpecModel):
    id: Optional[str] = None
    title: Optional[str] = None
    mode: RhythmMode
    generator: GeneratorConfig
