"""
Plausible measurement ranges
============================

Height-and-gender dependent bounds for every measurement field. Kept free of
vision dependencies so the plausibility reporter can import it on its own.

Ranges are closed intervals. Fixed ranges (neck, wrist, ankle) do not scale
with height, so at the extremes of height the consistency repair has to fit
the lower leg taper between them and the height-proportional ones.
"""

import math
from dataclasses import dataclass
from typing import Dict

from .geometry import clamp
from .landmarks import BodyGender

@dataclass(frozen=True)
class PlausibleRange:
    min: float
    max: float

    def clamp(self, value: float) -> float:
        return clamp(value, self.min, self.max)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def round_within(self, value: float, digits: int) -> float:
        """
        Round to ``digits`` places without leaving the range

        A value clamped onto a bound rounds inward rather than to the
        nearest step.
        """
        rounded = round(value, digits)
        scale = 10 ** digits
        if rounded < self.min:
            rounded = round(math.ceil(self.min * scale) / scale, digits)
            if rounded < self.min:
                rounded = round(rounded + 1 / scale, digits)
        elif rounded > self.max:
            rounded = round(math.floor(self.max * scale) / scale, digits)
            if rounded > self.max:
                rounded = round(rounded - 1 / scale, digits)
        return rounded

# Fractions of height
HEIGHT_FRACTIONS = {
    BodyGender.FEMALE: {
        "bust": (0.45, 0.80),
        "chest": (0.44, 0.80),
        "waist": (0.33, 0.75),
        "hips": (0.48, 0.85),
        "shoulder": (0.20, 0.35),
        "arm_length": (0.30, 0.40),
        "sleeve_length": (0.28, 0.39),
        "inseam": (0.38, 0.52),
        "back_length": (0.20, 0.28),
        "front_length": (0.17, 0.28),
        "thigh": (0.28, 0.42),
        "knee": (0.19, 0.27),
        "calf": (0.16, 0.26),
    },
    BodyGender.MALE: {
        "bust": (0.45, 0.80),
        "chest": (0.44, 0.80),
        "waist": (0.38, 0.75),
        "hips": (0.45, 0.80),
        "shoulder": (0.22, 0.36),
        "arm_length": (0.31, 0.41),
        "sleeve_length": (0.29, 0.40),
        "inseam": (0.38, 0.52),
        "back_length": (0.22, 0.30),
        "front_length": (0.19, 0.30),
        "thigh": (0.28, 0.40),
        "knee": (0.20, 0.27),
        "calf": (0.17, 0.26),
    },
}

# Centimeters, independent of height
FIXED_RANGES_CM = {
    BodyGender.FEMALE: {
        "neck": (28.0, 42.0),
        "wrist": (13.0, 19.0),
        "ankle": (18.0, 27.0),
    },
    BodyGender.MALE: {
        "neck": (33.0, 50.0),
        "wrist": (15.0, 21.0),
        "ankle": (20.0, 30.0),
    },
}

WEIGHT_RANGE_KG = (35.0, 200.0)

FIELD_UNITS = {"weight": "kg"}

def unit_for(field: str) -> str:
    return FIELD_UNITS.get(field, "cm")

def get_plausible_ranges(height_cm: float, gender) -> Dict[str, PlausibleRange]:
    """Fresh set of plausible ranges for a subject"""
    gender = BodyGender.parse(gender)

    ranges = {
        name: PlausibleRange(low * height_cm, high * height_cm)
        for name, (low, high) in HEIGHT_FRACTIONS[gender].items()
    }
    for name, (low, high) in FIXED_RANGES_CM[gender].items():
        ranges[name] = PlausibleRange(low, high)
    ranges["weight"] = PlausibleRange(*WEIGHT_RANGE_KG)

    return ranges
