"""
Anthropometric Body-Ratio Model
===============================

Population-calibrated multipliers that turn landmark widths into girths and
lengths, keyed by gender and versioned so recalibration is a data change.
The shape classifier derives a per-subject copy of a table from the
shoulder-to-hip width ratio; base tables are frozen and never modified.
"""

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Dict, Iterable, Tuple

from .geometry import clamp
from .landmarks import BodyGender

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class BodyRatioSet:
    """Anthropometric multipliers for one gender"""
    # Single-view girths
    bust_from_shoulder: float       # bust = shoulder width x ratio
    waist_from_hip_width: float     # waist = hip joint width x ratio
    hips_from_hip_width: float      # hips = hip joint width x ratio

    # Two-view ellipse half-widths
    bust_half_width_ratio: float    # of shoulder width
    waist_half_width_ratio: float   # of hip joint width
    hip_half_width_ratio: float     # of hip joint width

    # Depth fallbacks when the side photo is unusable
    bust_depth_ratio: float         # of shoulder width
    waist_depth_ratio: float        # of hip joint width
    hip_depth_ratio: float          # of hip joint width

    # Secondary girths
    neck_width_from_ears: float
    neck_circ_factor: float
    thigh_from_hip_width: float
    knee_from_knee_width: float
    calf_from_knee_width: float
    ankle_from_ankle_width: float
    wrist_from_forearm: float

    # Lengths
    waist_height_ratio: float       # waist line between shoulders (0) and hips (1)
    back_length_correction: float   # spine curvature
    front_to_back: float
    sleeve_from_arm: float

    # Weight
    average_bmi: float
    bmi_whtr_slope: float           # BMI points per unit of waist-to-height deviation

    version: str = "v1"

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

class BodyShape(Enum):
    """Build detected from the shoulder-to-hip width ratio"""
    PEAR = "pear"
    HOURGLASS = "hourglass"
    INVERTED_TRIANGLE = "inverted_triangle"
    RECTANGLE = "rectangle"
    V_SHAPE = "v_shape"
    STOCKY = "stocky"
    UNKNOWN = "unknown"

BODY_RATIOS_V1: Dict[BodyGender, BodyRatioSet] = {
    BodyGender.FEMALE: BodyRatioSet(
        bust_from_shoulder=2.65,
        waist_from_hip_width=3.00,
        hips_from_hip_width=4.10,
        bust_half_width_ratio=0.52,
        waist_half_width_ratio=0.54,
        hip_half_width_ratio=0.72,
        bust_depth_ratio=0.62,
        waist_depth_ratio=0.85,
        hip_depth_ratio=1.18,
        neck_width_from_ears=0.72,
        neck_circ_factor=1.15,
        thigh_from_hip_width=2.35,
        knee_from_knee_width=1.80,
        calf_from_knee_width=1.70,
        ankle_from_ankle_width=1.35,
        wrist_from_forearm=0.60,
        waist_height_ratio=0.58,
        back_length_correction=1.20,
        front_to_back=0.97,
        sleeve_from_arm=0.97,
        average_bmi=22.0,
        bmi_whtr_slope=38.0,
        version="v1",
    ),
    BodyGender.MALE: BodyRatioSet(
        bust_from_shoulder=2.52,
        waist_from_hip_width=3.30,
        hips_from_hip_width=3.75,
        bust_half_width_ratio=0.50,
        waist_half_width_ratio=0.62,
        hip_half_width_ratio=0.66,
        bust_depth_ratio=0.58,
        waist_depth_ratio=0.95,
        hip_depth_ratio=1.05,
        neck_width_from_ears=0.82,
        neck_circ_factor=1.12,
        thigh_from_hip_width=2.15,
        knee_from_knee_width=1.85,
        calf_from_knee_width=1.72,
        ankle_from_ankle_width=1.45,
        wrist_from_forearm=0.66,
        waist_height_ratio=0.62,
        back_length_correction=1.18,
        front_to_back=0.94,
        sleeve_from_arm=0.97,
        average_bmi=23.5,
        bmi_whtr_slope=42.0,
        version="v1",
    ),
}

RATIO_TABLES: Dict[str, Dict[BodyGender, BodyRatioSet]] = {
    "v1": BODY_RATIOS_V1,
}

# Sane bounds for multipliers the shape classifier may move
RATIO_BOUNDS: Dict[str, Tuple[float, float]] = {
    "bust_from_shoulder": (2.0, 3.2),
    "waist_from_hip_width": (2.4, 3.9),
    "hips_from_hip_width": (3.0, 4.8),
    "bust_half_width_ratio": (0.40, 0.65),
    "waist_half_width_ratio": (0.40, 0.80),
    "hip_half_width_ratio": (0.50, 0.90),
    "bust_depth_ratio": (0.45, 0.80),
    "waist_depth_ratio": (0.65, 1.15),
    "hip_depth_ratio": (0.85, 1.45),
    "thigh_from_hip_width": (1.8, 2.8),
}

BUST_FIELDS = ("bust_from_shoulder", "bust_half_width_ratio", "bust_depth_ratio")
WAIST_FIELDS = ("waist_from_hip_width", "waist_half_width_ratio", "waist_depth_ratio")
HIP_FIELDS = ("hips_from_hip_width", "hip_half_width_ratio", "hip_depth_ratio")
THIGH_FIELDS = ("thigh_from_hip_width",)

# Shoulder/hip width ratio thresholds
FEMALE_PEAR_BELOW = 0.95
FEMALE_HOURGLASS_RANGE = (0.95, 1.05)
FEMALE_INVERTED_ABOVE = 1.10
MALE_V_SHAPE_ABOVE = 1.15
MALE_STOCKY_BELOW = 1.0

def get_ratio_table(gender, version: str = "v1") -> BodyRatioSet:
    """Base ratio table for a gender and table version"""
    gender = BodyGender.parse(gender)
    if version not in RATIO_TABLES:
        raise ValueError(f"Unknown ratio table version: {version!r}")
    return RATIO_TABLES[version][gender]

def classify_body_shape(shoulder_px: float, hip_px: float, gender) -> BodyShape:
    """Classify the build from front-view shoulder and hip joint widths"""
    gender = BodyGender.parse(gender)
    if shoulder_px <= 0 or hip_px <= 0:
        return BodyShape.UNKNOWN

    ratio = shoulder_px / hip_px

    if gender == BodyGender.FEMALE:
        if ratio < FEMALE_PEAR_BELOW:
            return BodyShape.PEAR
        if ratio > FEMALE_INVERTED_ABOVE:
            return BodyShape.INVERTED_TRIANGLE
        if FEMALE_HOURGLASS_RANGE[0] <= ratio <= FEMALE_HOURGLASS_RANGE[1]:
            return BodyShape.HOURGLASS
        return BodyShape.RECTANGLE

    if ratio > MALE_V_SHAPE_ABOVE:
        return BodyShape.V_SHAPE
    if ratio < MALE_STOCKY_BELOW:
        return BodyShape.STOCKY
    return BodyShape.RECTANGLE

def _intensity(distance: float, span: float) -> float:
    return min(max(distance / span, 0.0), 1.0)

def _scaled(ratios: BodyRatioSet, names: Iterable[str], factor: float) -> Dict[str, float]:
    return {name: getattr(ratios, name) * factor for name in names}

def adjust_ratios(base: BodyRatioSet, shoulder_px: float, hip_px: float,
                  gender) -> Tuple[BodyRatioSet, BodyShape]:
    """
    Derive a per-subject copy of a ratio table

    Args:
        base: Population table for the subject's gender
        shoulder_px: Front-view shoulder width in pixels
        hip_px: Front-view hip joint width in pixels
        gender: Subject gender

    Returns:
        (adjusted table, detected shape); the base table when a width is zero
    """
    shape = classify_body_shape(shoulder_px, hip_px, gender)
    if shape == BodyShape.UNKNOWN:
        return base, shape

    ratio = shoulder_px / hip_px
    updates: Dict[str, float] = {}

    if shape == BodyShape.PEAR:
        i = _intensity(FEMALE_PEAR_BELOW - ratio, 0.20)
        updates.update(_scaled(base, HIP_FIELDS + THIGH_FIELDS, 1 + 0.08 * i))
        updates.update(_scaled(base, BUST_FIELDS, 1 - 0.05 * i))
    elif shape == BodyShape.INVERTED_TRIANGLE:
        i = _intensity(ratio - FEMALE_INVERTED_ABOVE, 0.30)
        updates.update(_scaled(base, BUST_FIELDS, 1 + 0.06 * i))
        updates.update(_scaled(base, HIP_FIELDS, 1 - 0.06 * i))
    elif shape == BodyShape.HOURGLASS:
        updates.update(_scaled(base, BUST_FIELDS + HIP_FIELDS, 1.03))
        updates.update(_scaled(base, WAIST_FIELDS, 0.95))
    elif shape == BodyShape.V_SHAPE:
        i = _intensity(ratio - MALE_V_SHAPE_ABOVE, 0.35)
        updates.update(_scaled(base, BUST_FIELDS, 1 + 0.05 * i))
        updates.update(_scaled(base, WAIST_FIELDS, 1 - 0.06 * i))
    elif shape == BodyShape.STOCKY:
        i = _intensity(MALE_STOCKY_BELOW - ratio, 0.20)
        updates.update(_scaled(base, WAIST_FIELDS + HIP_FIELDS + THIGH_FIELDS, 1 + 0.06 * i))

    for name, value in updates.items():
        low, high = RATIO_BOUNDS[name]
        updates[name] = clamp(value, low, high)

    logger.debug(f"Body shape {shape.value} (shoulder/hip {ratio:.2f}), adjusted {sorted(updates)}")
    return replace(base, **updates), shape
