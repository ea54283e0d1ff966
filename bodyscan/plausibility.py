"""
Measurement plausibility checks
===============================

Flags suspicious values in a finished measurement set without re-deriving
anything. Depends only on the range model, never on OpenCV or MediaPipe, so
it can run wherever measurements are displayed or edited.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional

from .landmarks import BodyGender
from .ranges import get_plausible_ranges, unit_for

WARNING = "warning"
CRITICAL = "critical"

@dataclass(frozen=True)
class MeasurementWarning:
    field: str
    message: str
    severity: str

def _value(measurements: Mapping[str, float], name: str) -> Optional[float]:
    value = measurements.get(name)
    if value is None or value == 0:
        return None
    return float(value)

def check_plausibility(measurements: Mapping[str, float], height_cm: float, gender) -> List[MeasurementWarning]:
    """
    Check measurements for out-of-range values and cross-field inconsistencies

    Values outside their plausible range are warnings, or critical when they
    fall more than 10% of the range width beyond it.
    """
    gender = BodyGender.parse(gender)
    warnings: List[MeasurementWarning] = []
    ranges = get_plausible_ranges(height_cm, gender)

    for name, plausible in ranges.items():
        value = measurements.get(name)
        if value is None or plausible.contains(value):
            continue

        unit = unit_for(name)
        expected = f"expected {round(plausible.min)}–{round(plausible.max)} {unit}"
        margin = (plausible.max - plausible.min) * 0.1

        if value < plausible.min:
            warnings.append(MeasurementWarning(
                name,
                f"{value} {unit} seems too low ({expected})",
                CRITICAL if value < plausible.min - margin else WARNING,
            ))
        else:
            warnings.append(MeasurementWarning(
                name,
                f"{value} {unit} seems too high ({expected})",
                CRITICAL if value > plausible.max + margin else WARNING,
            ))

    bust = _value(measurements, "bust")
    chest = _value(measurements, "chest")
    waist = _value(measurements, "waist")
    hips = _value(measurements, "hips")
    shoulder = _value(measurements, "shoulder")
    thigh = _value(measurements, "thigh")
    knee = _value(measurements, "knee")
    calf = _value(measurements, "calf")
    ankle = _value(measurements, "ankle")
    inseam = _value(measurements, "inseam")
    sleeve_length = _value(measurements, "sleeve_length")

    if hips and waist:
        if gender == BodyGender.FEMALE and hips < waist:
            warnings.append(MeasurementWarning(
                "hips", "Hips smaller than waist, unusual for a female body type", CRITICAL))
        elif gender == BodyGender.MALE and hips < waist * 0.9:
            warnings.append(MeasurementWarning(
                "hips", "Hips significantly smaller than waist", WARNING))

    if gender == BodyGender.MALE and chest and waist and chest < waist * 0.92:
        warnings.append(MeasurementWarning(
            "chest", "Chest smaller than waist, unusual for a male body type", WARNING))

    if shoulder and bust and shoulder > bust:
        warnings.append(MeasurementWarning(
            "shoulder", "Shoulder width exceeds bust circumference, check measurement", CRITICAL))

    if thigh and knee and thigh < knee:
        warnings.append(MeasurementWarning(
            "knee", "Knee larger than thigh, measurements may be swapped", CRITICAL))
    if knee and calf and knee < calf:
        warnings.append(MeasurementWarning(
            "calf", "Calf larger than knee, measurements may be swapped", CRITICAL))
    if calf and ankle and calf < ankle:
        warnings.append(MeasurementWarning(
            "ankle", "Ankle larger than calf, measurements may be swapped", CRITICAL))

    if inseam and height_cm:
        ratio = inseam / height_cm
        if ratio < 0.38:
            warnings.append(MeasurementWarning("inseam", "Inseam seems short relative to height", WARNING))
        elif ratio > 0.52:
            warnings.append(MeasurementWarning("inseam", "Inseam seems long relative to height", WARNING))

    if sleeve_length and height_cm:
        ratio = sleeve_length / height_cm
        if ratio < 0.25:
            warnings.append(MeasurementWarning(
                "sleeve_length", "Sleeve length seems short relative to height", WARNING))
        elif ratio > 0.42:
            warnings.append(MeasurementWarning(
                "sleeve_length", "Sleeve length seems long relative to height", WARNING))

    return warnings
