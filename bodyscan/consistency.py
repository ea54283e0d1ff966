"""
Anatomical consistency repair
=============================

Ordered rules that nudge violating fields of a clamped measurement set toward
each other. Rules run in a fixed order; in ``single_pass`` mode the set is
walked once, in ``fixed_point`` mode the walk repeats until no rule fires.

When plausible ranges are supplied the repaired set is then fitted back inside
them, keeping the orderings the rules establish.
"""

import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .config import CrossValidationMode, MeasurementConfig
from .landmarks import BodyGender
from .ranges import PlausibleRange

Rule = Callable[[Dict[str, float], BodyGender], bool]

# Widest to narrowest
LOWER_LEG = ("thigh", "knee", "calf", "ankle")

def _has(values: Mapping[str, float], *names: str) -> bool:
    return all(name in values for name in names)

def bust_below_waist(m: Dict[str, float], gender: BodyGender) -> bool:
    if not _has(m, "bust", "waist") or m["bust"] >= m["waist"]:
        return False
    avg = (m["bust"] + m["waist"]) / 2
    m["bust"] = avg + 2
    m["waist"] = avg - 2
    return True

def hips_below_waist(m: Dict[str, float], gender: BodyGender) -> bool:
    if gender != BodyGender.FEMALE or not _has(m, "hips", "waist") or m["hips"] >= m["waist"]:
        return False
    m["hips"] = m["waist"] + 4
    return True

def thigh_below_knee(m: Dict[str, float], gender: BodyGender) -> bool:
    if not _has(m, "thigh", "knee") or m["thigh"] > m["knee"]:
        return False
    avg = (m["thigh"] + m["knee"]) / 2
    m["thigh"] = avg + 1
    m["knee"] = avg - 1
    return True

def knee_below_calf(m: Dict[str, float], gender: BodyGender) -> bool:
    if not _has(m, "knee", "calf") or m["knee"] > m["calf"]:
        return False
    m["calf"] = m["knee"] - 2
    return True

def calf_below_ankle(m: Dict[str, float], gender: BodyGender) -> bool:
    if not _has(m, "calf", "ankle") or m["calf"] > m["ankle"]:
        return False
    m["ankle"] = m["calf"] - 2
    return True

def chest_bust_mismatch(m: Dict[str, float], gender: BodyGender) -> bool:
    if not _has(m, "chest", "bust") or abs(m["chest"] - m["bust"]) <= 5:
        return False
    m["chest"] = m["bust"] - 1
    return True

def front_back_ratio(m: Dict[str, float], gender: BodyGender) -> bool:
    if not _has(m, "front_length", "back_length") or m["back_length"] <= 0:
        return False
    ratio = m["front_length"] / m["back_length"]
    if ratio > 1.0:
        m["front_length"] = m["back_length"] * 0.95
        return True
    if ratio < 0.85:
        m["front_length"] = m["back_length"] * 0.92
        return True
    return False

RULES: List[Tuple[str, Rule]] = [
    ("bust_below_waist", bust_below_waist),
    ("hips_below_waist", hips_below_waist),
    ("thigh_below_knee", thigh_below_knee),
    ("knee_below_calf", knee_below_calf),
    ("calf_below_ankle", calf_below_ankle),
    ("chest_bust_mismatch", chest_bust_mismatch),
    ("front_back_ratio", front_back_ratio),
]

class CrossValidator:
    """Applies the anatomical consistency rules to a measurement set"""

    def __init__(self, config: Optional[MeasurementConfig] = None):
        self.config = config or MeasurementConfig()
        self.mode = CrossValidationMode(self.config.cross_validation_mode)
        self.logger = logging.getLogger(__name__)

    def _apply_once(self, values: Dict[str, float], gender: BodyGender) -> List[str]:
        fired = []
        for name, rule in RULES:
            if rule(values, gender):
                fired.append(name)
        return fired

    def _fit_lower_leg(self, values: Dict[str, float], ranges: Mapping[str, PlausibleRange]):
        names = [name for name in LOWER_LEG if name in values]
        if len(names) < 2:
            return

        gap = self.config.taper_gap_cm
        unbounded = PlausibleRange(float("-inf"), float("inf"))
        bounds = [ranges.get(name, unbounded) for name in names]

        # Tightest bounds that still leave room for the rest of the chain
        lows = [bound.min for bound in bounds]
        for i in range(len(names) - 2, -1, -1):
            lows[i] = max(lows[i], lows[i + 1] + gap)
        highs = [bound.max for bound in bounds]
        for i in range(1, len(names)):
            highs[i] = min(highs[i], highs[i - 1] - gap)

        if any(low > high for low, high in zip(lows, highs)):
            self.logger.warning(f"Lower leg ranges cannot hold a {gap}cm taper, keeping range bounds only")
            return

        previous = None
        for name, low, high in zip(names, lows, highs):
            if previous is not None:
                high = min(high, previous - gap)
            values[name] = min(max(values[name], low), high)
            previous = values[name]

    def _fit_to_ranges(self, values: Dict[str, float], gender: BodyGender,
                       ranges: Mapping[str, PlausibleRange]) -> bool:
        before = dict(values)

        for name, plausible in ranges.items():
            if name in values:
                values[name] = plausible.clamp(values[name])

        self._fit_lower_leg(values, ranges)

        if _has(values, "bust", "waist"):
            ceiling = values["bust"]
            if gender == BodyGender.FEMALE and "hips" in values:
                ceiling = min(ceiling, values["hips"])
            values["waist"] = min(values["waist"], ceiling)

        if _has(values, "chest", "bust"):
            plausible = ranges.get("chest")
            low, high = values["bust"] - 5, values["bust"] + 5
            if plausible is not None:
                low, high = max(low, plausible.min), min(high, plausible.max)
            values["chest"] = min(max(values["chest"], low), high)

        if _has(values, "front_length", "back_length"):
            plausible = ranges.get("front_length")
            low, high = values["back_length"] * 0.85, values["back_length"]
            if plausible is not None:
                low, high = max(low, plausible.min), min(high, plausible.max)
            if low <= high:
                values["front_length"] = min(max(values["front_length"], low), high)

        return values != before

    def validate(self, measurements: Mapping[str, float], gender,
                 ranges: Optional[Mapping[str, PlausibleRange]] = None) -> Tuple[Dict[str, float], List[str]]:
        """
        Repair ordering violations

        Args:
            measurements: Clamped measurement set
            gender: 'male' or 'female'
            ranges: Plausible ranges the repaired set must stay inside

        Returns:
            (repaired copy of the measurements, names of the rules that fired)
        """
        gender = BodyGender.parse(gender)
        values = dict(measurements)
        repairs: List[str] = []

        if self.mode == CrossValidationMode.SINGLE_PASS:
            repairs = self._apply_once(values, gender)
        else:
            for _ in range(self.config.max_cross_validation_iterations):
                fired = self._apply_once(values, gender)
                if not fired:
                    break
                repairs.extend(name for name in fired if name not in repairs)
            else:
                self.logger.warning(
                    f"Consistency rules still firing after {self.config.max_cross_validation_iterations} passes"
                )

        if ranges is not None and self._fit_to_ranges(values, gender, ranges):
            repairs.append("range_fit")

        for name in repairs:
            self.logger.debug(f"Consistency repair applied: {name}")

        return values, repairs
