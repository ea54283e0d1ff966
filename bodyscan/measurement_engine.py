"""
Body Measurement Estimation Engine
==================================

Turns front (and optionally side) pose landmarks plus a known height into a
self-consistent set of tailoring measurements:

    landmarks + height + gender
        -> scale calibration
        -> body-ratio model (+ shape adjustment)
        -> linear extractor / circumference estimator (each field clamped)
        -> anatomical cross-validation
        -> rounded measurement set + confidence score
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .body_ratios import BodyRatioSet, BodyShape, adjust_ratios, classify_body_shape, get_ratio_table
from .calibration import ScaleCalibrator
from .config import BodyScanConfig, MeasurementConfig, get_config
from .consistency import CrossValidator
from .geometry import clamp, distance_px, ellipse_circumference, midpoint, mid_y
from .landmarks import KEY_LANDMARKS, BodyGender, Landmark, PoseLandmark as P, validate_landmarks
from .ranges import PlausibleRange, get_plausible_ranges

MEASUREMENT_FIELDS = [
    "bust", "waist", "hips", "shoulder", "arm_length", "inseam", "neck", "chest",
    "back_length", "front_length", "sleeve_length", "wrist", "thigh", "knee",
    "calf", "ankle", "height", "weight",
]

# Side-view landmark clusters used to measure body depth at each level
DEPTH_CLUSTERS = {
    "bust": (P.LEFT_SHOULDER, P.RIGHT_SHOULDER, P.LEFT_ELBOW, P.RIGHT_ELBOW, P.NOSE),
    "waist": (P.LEFT_SHOULDER, P.RIGHT_SHOULDER, P.LEFT_HIP, P.RIGHT_HIP),
    "hips": (P.LEFT_HIP, P.RIGHT_HIP, P.LEFT_KNEE, P.RIGHT_KNEE),
}

@dataclass
class MeasurementResult:
    """Output of one estimation call"""
    measurements: Dict[str, float]
    confidence: float
    landmark_quality: float
    body_shape: str = BodyShape.UNKNOWN.value
    used_side_view: bool = False
    side_depth_sources: Dict[str, str] = field(default_factory=dict)
    repairs: List[str] = field(default_factory=list)
    ratio_table_version: str = "v1"

    def to_dict(self) -> Dict:
        return {
            'measurements': dict(self.measurements),
            'confidence': self.confidence,
            'landmark_quality': self.landmark_quality,
            'body_shape': self.body_shape,
            'used_side_view': self.used_side_view,
            'side_depth_sources': dict(self.side_depth_sources),
            'repairs': list(self.repairs),
            'ratio_table_version': self.ratio_table_version,
        }

@dataclass
class ViewGeometry:
    """A landmark set with the pixel size of its photo and its cm/px scale"""
    landmarks: Sequence[Landmark]
    width: float
    height: float
    scale: float

    def cm(self, a: Landmark, b: Landmark) -> float:
        return distance_px(a, b, self.width, self.height) * self.scale

def _clamped(ranges: Mapping[str, PlausibleRange], name: str, value: float) -> float:
    return ranges[name].clamp(value) if name in ranges else value

class LinearMeasurementExtractor:
    """Lengths taken directly from landmark-to-landmark distances"""

    def __init__(self, config: Optional[MeasurementConfig] = None):
        self.config = config or MeasurementConfig()
        self.logger = logging.getLogger(__name__)

    def waist_height_ratio(self, side: Optional[Sequence[Landmark]], default: float) -> float:
        """
        Fraction of the shoulder-to-hip span where the natural waist sits

        The elbow of a relaxed arm hangs just below the natural waist, so a
        visible side-view elbow between shoulder and hip height refines the
        gender default.
        """
        if side is None:
            return default

        left, right = side[P.LEFT_ELBOW], side[P.RIGHT_ELBOW]
        elbow = left if left.visibility >= right.visibility else right
        if elbow.visibility <= self.config.side_visibility_threshold:
            return default

        shoulder_y = mid_y(side[P.LEFT_SHOULDER], side[P.RIGHT_SHOULDER])
        hip_y = mid_y(side[P.LEFT_HIP], side[P.RIGHT_HIP])
        if not shoulder_y < elbow.y < hip_y:
            return default

        relative = (elbow.y - shoulder_y) / (hip_y - shoulder_y)
        low, high = self.config.waist_ratio_bounds
        ratio = clamp(relative - self.config.waist_ratio_elbow_correction, low, high)
        self.logger.debug(f"Waist height ratio from side elbow: {ratio:.3f} (default {default:.3f})")
        return ratio

    def extract(self, front: ViewGeometry, side: Optional[Sequence[Landmark]],
                ratios: BodyRatioSet, ranges: Mapping[str, PlausibleRange]) -> Dict[str, float]:
        lm = front.landmarks
        values = {}

        values["shoulder"] = _clamped(ranges, "shoulder", front.cm(lm[P.LEFT_SHOULDER], lm[P.RIGHT_SHOULDER]))

        left_arm = front.cm(lm[P.LEFT_SHOULDER], lm[P.LEFT_ELBOW]) + front.cm(lm[P.LEFT_ELBOW], lm[P.LEFT_WRIST])
        right_arm = front.cm(lm[P.RIGHT_SHOULDER], lm[P.RIGHT_ELBOW]) + front.cm(lm[P.RIGHT_ELBOW], lm[P.RIGHT_WRIST])
        values["arm_length"] = _clamped(ranges, "arm_length", (left_arm + right_arm) / 2)
        values["sleeve_length"] = _clamped(ranges, "sleeve_length", values["arm_length"] * ratios.sleeve_from_arm)

        hip_center = midpoint(lm[P.LEFT_HIP], lm[P.RIGHT_HIP])
        left_leg = front.cm(hip_center, lm[P.LEFT_KNEE]) + front.cm(lm[P.LEFT_KNEE], lm[P.LEFT_ANKLE])
        right_leg = front.cm(hip_center, lm[P.RIGHT_KNEE]) + front.cm(lm[P.RIGHT_KNEE], lm[P.RIGHT_ANKLE])
        values["inseam"] = _clamped(ranges, "inseam", (left_leg + right_leg) / 2)

        waist_ratio = self.waist_height_ratio(side, ratios.waist_height_ratio)
        shoulder_y = mid_y(lm[P.LEFT_SHOULDER], lm[P.RIGHT_SHOULDER])
        hip_y = mid_y(lm[P.LEFT_HIP], lm[P.RIGHT_HIP])
        waist_y = shoulder_y + (hip_y - shoulder_y) * waist_ratio
        back_px = (waist_y - shoulder_y) * front.height
        values["back_length"] = _clamped(ranges, "back_length", back_px * front.scale * ratios.back_length_correction)
        values["front_length"] = _clamped(ranges, "front_length", values["back_length"] * ratios.front_to_back)

        return values

class CircumferenceEstimator:
    """Girths from two-view ellipses or single-view population ratios"""

    def __init__(self, config: Optional[MeasurementConfig] = None):
        self.config = config or MeasurementConfig()
        self.logger = logging.getLogger(__name__)

    def estimate_side_depth(self, side: ViewGeometry, level: str) -> float:
        """
        Front-to-back body thickness at a body level from the side photo

        Returns 0 when fewer than two landmarks of the level's cluster are
        visible.
        """
        visible = [
            side.landmarks[idx].x for idx in DEPTH_CLUSTERS[level]
            if side.landmarks[idx].visibility > self.config.side_visibility_threshold
        ]
        if len(visible) < 2:
            return 0.0

        xs = np.asarray(visible, dtype=float)
        return float(xs.max() - xs.min()) * side.width * side.scale

    def resolve_depth(self, side_depth: float, reference_width: float,
                      depth_ratio: float) -> Tuple[float, str]:
        """Accept a side depth or replace it with the ratio estimate"""
        if side_depth >= self.config.min_side_depth_cm:
            return side_depth, "side"
        return max(self.config.depth_floor_cm, reference_width * depth_ratio), "ratio"

    def estimate(self, front: ViewGeometry, side: Optional[ViewGeometry], shoulder: float,
                 height_cm: float, ratios: BodyRatioSet,
                 ranges: Mapping[str, PlausibleRange]) -> Tuple[Dict[str, float], Dict[str, str]]:
        """
        Args:
            front: Front view geometry
            side: Side view geometry, or None for single-view estimation
            shoulder: Clamped shoulder width in cm
            height_cm: Subject height
            ratios: Per-subject ratio table
            ranges: Plausible ranges for the subject

        Returns:
            (girths and weight, depth source per level for two-view estimation)
        """
        lm = front.landmarks
        hip_width = front.cm(lm[P.LEFT_HIP], lm[P.RIGHT_HIP])
        values = {}
        sources = {}

        if side is not None:
            depth_inputs = {
                "bust": (shoulder, ratios.bust_depth_ratio),
                "waist": (hip_width, ratios.waist_depth_ratio),
                "hips": (hip_width, ratios.hip_depth_ratio),
            }
            depths = {}
            for level, (reference_width, depth_ratio) in depth_inputs.items():
                side_depth = self.estimate_side_depth(side, level)
                depths[level], sources[level] = self.resolve_depth(side_depth, reference_width, depth_ratio)
                if sources[level] == "ratio":
                    self.logger.debug(
                        f"Side depth for {level} rejected ({side_depth:.1f}cm), "
                        f"using ratio depth {depths[level]:.1f}cm"
                    )

            bust = ellipse_circumference(shoulder * ratios.bust_half_width_ratio, depths["bust"] / 2)
            waist = ellipse_circumference(hip_width * ratios.waist_half_width_ratio, depths["waist"] / 2)
            hips = ellipse_circumference(hip_width * ratios.hip_half_width_ratio, depths["hips"] / 2)
        else:
            bust = shoulder * ratios.bust_from_shoulder
            waist = hip_width * ratios.waist_from_hip_width
            hips = hip_width * ratios.hips_from_hip_width

        values["bust"] = _clamped(ranges, "bust", bust)
        values["chest"] = _clamped(ranges, "chest", bust)
        values["waist"] = _clamped(ranges, "waist", waist)
        values["hips"] = _clamped(ranges, "hips", hips)

        ear_width = front.cm(lm[P.LEFT_EAR], lm[P.RIGHT_EAR])
        neck = ear_width * ratios.neck_width_from_ears * math.pi * ratios.neck_circ_factor
        values["neck"] = _clamped(ranges, "neck", neck)

        values["thigh"] = _clamped(ranges, "thigh", hip_width * ratios.thigh_from_hip_width)

        knee_width = front.cm(lm[P.LEFT_KNEE], lm[P.RIGHT_KNEE])
        values["knee"] = _clamped(ranges, "knee", knee_width * ratios.knee_from_knee_width)
        values["calf"] = _clamped(ranges, "calf", knee_width * ratios.calf_from_knee_width)

        ankle_width = front.cm(lm[P.LEFT_ANKLE], lm[P.RIGHT_ANKLE])
        values["ankle"] = _clamped(ranges, "ankle", ankle_width * ratios.ankle_from_ankle_width)

        forearm = (front.cm(lm[P.LEFT_ELBOW], lm[P.LEFT_WRIST]) + front.cm(lm[P.RIGHT_ELBOW], lm[P.RIGHT_WRIST])) / 2
        values["wrist"] = _clamped(ranges, "wrist", forearm * ratios.wrist_from_forearm)

        values["weight"] = _clamped(ranges, "weight", self.estimate_weight(values["waist"], height_cm, ratios))

        return values, sources

    def estimate_weight(self, waist_cm: float, height_cm: float, ratios: BodyRatioSet) -> float:
        """BMI-based weight, individualised by the waist-to-height ratio"""
        waist_to_height = waist_cm / height_cm
        bmi = ratios.average_bmi + (waist_to_height - self.config.population_waist_to_height) * ratios.bmi_whtr_slope
        height_m = height_cm / 100
        return bmi * height_m * height_m

def score_confidence(front: Sequence[Landmark], used_side_view: bool,
                     config: Optional[MeasurementConfig] = None) -> Tuple[float, float]:
    """
    Heuristic reliability score

    Returns:
        (confidence, average visibility of the key landmarks)
    """
    config = config or MeasurementConfig()
    visibility = float(np.mean([front[idx].visibility for idx in KEY_LANDMARKS]))
    bonus = config.side_photo_bonus if used_side_view else 0.0
    low, high = config.confidence_bounds
    confidence = min(high, max(low, visibility * config.visibility_weight + bonus))
    return confidence, visibility

class MeasurementEngine:
    """Estimates tailoring measurements from pose landmarks"""

    def __init__(self, config: Optional[BodyScanConfig] = None):
        self.config = config or get_config()
        self.logger = logging.getLogger(__name__)

        self.calibrator = ScaleCalibrator(self.config.calibration)
        self.linear_extractor = LinearMeasurementExtractor(self.config.measurement)
        self.circumference_estimator = CircumferenceEstimator(self.config.measurement)
        self.cross_validator = CrossValidator(self.config.measurement)

    def _validate_inputs(self, height_cm: float, front_width: float, front_height: float):
        if not math.isfinite(height_cm) or height_cm <= 0:
            raise ValueError(f"Height must be a positive number of centimeters, got {height_cm}")
        if front_width <= 0 or front_height <= 0:
            raise ValueError(f"Invalid front image size: {front_width}x{front_height}")

    def calculate_measurements(self,
                               front: Sequence[Landmark],
                               side: Optional[Sequence[Landmark]],
                               height_cm: float,
                               front_width: float,
                               front_height: float,
                               side_width: Optional[float] = None,
                               side_height: Optional[float] = None,
                               gender="female") -> MeasurementResult:
        """
        Estimate a full measurement set

        Args:
            front: 33 front-view landmarks
            side: 33 side-view landmarks, or None
            height_cm: Subject's true height
            front_width: Front photo width in pixels
            front_height: Front photo height in pixels
            side_width: Side photo width in pixels
            side_height: Side photo height in pixels
            gender: 'male' or 'female'

        Raises:
            ValueError: on malformed landmarks, image sizes, height or gender
        """
        start_time = time.time()
        settings = self.config.measurement

        gender = BodyGender.parse(gender)
        height_cm = float(height_cm)
        front = validate_landmarks(front, "front")
        self._validate_inputs(height_cm, front_width, front_height)

        if side is not None:
            side = validate_landmarks(side, "side")
            if not side_width or not side_height or side_width <= 0 or side_height <= 0:
                self.logger.warning("Side landmarks supplied without a valid side image size, using front view only")
                side = None

        front_scale = self.calibrator.estimate_scale(front, front_width, front_height, height_cm)
        front_view = ViewGeometry(front, front_width, front_height, front_scale)

        side_view = None
        if side is not None:
            side_scale = self.calibrator.estimate_scale(side, side_width, side_height, height_cm,
                                                        fallback=front_scale)
            side_view = ViewGeometry(side, side_width, side_height, side_scale)

        base_ratios = get_ratio_table(gender, settings.ratio_table_version)
        shoulder_px = distance_px(front[P.LEFT_SHOULDER], front[P.RIGHT_SHOULDER], front_width, front_height)
        hip_px = distance_px(front[P.LEFT_HIP], front[P.RIGHT_HIP], front_width, front_height)
        if settings.adjust_for_body_shape:
            ratios, shape = adjust_ratios(base_ratios, shoulder_px, hip_px, gender)
        else:
            ratios, shape = base_ratios, classify_body_shape(shoulder_px, hip_px, gender)

        ranges = get_plausible_ranges(height_cm, gender)

        values = self.linear_extractor.extract(front_view, side, ratios, ranges)
        girths, depth_sources = self.circumference_estimator.estimate(
            front_view, side_view, values["shoulder"], height_cm, ratios, ranges
        )
        values.update(girths)
        values["height"] = height_cm

        values, repairs = self.cross_validator.validate(values, gender, ranges)

        digits = settings.measurement_precision_digits
        measurements = {}
        for name in MEASUREMENT_FIELDS:
            value = values[name]
            measurements[name] = ranges[name].round_within(value, digits) if name in ranges else round(value, digits)

        confidence, visibility = score_confidence(front, side_view is not None, settings)

        result = MeasurementResult(
            measurements=measurements,
            confidence=round(confidence, 2),
            landmark_quality=round(visibility, 2),
            body_shape=shape.value,
            used_side_view=side_view is not None,
            side_depth_sources=depth_sources,
            repairs=repairs,
            ratio_table_version=ratios.version,
        )

        processing_time = (time.time() - start_time) * 1000
        self.logger.info(
            f"Estimated {len(measurements)} measurements ({gender.value}, {shape.value}, "
            f"{'two-view' if result.used_side_view else 'single-view'}) "
            f"confidence {result.confidence:.2f}, {len(repairs)} repairs in {processing_time:.1f}ms"
        )

        return result

def calculate_measurements(front: Sequence[Landmark],
                           side: Optional[Sequence[Landmark]],
                           height_cm: float,
                           front_width: float,
                           front_height: float,
                           side_width: Optional[float] = None,
                           side_height: Optional[float] = None,
                           gender="female",
                           config: Optional[BodyScanConfig] = None) -> MeasurementResult:
    """Estimate measurements with a one-off engine"""
    engine = MeasurementEngine(config)
    return engine.calculate_measurements(front, side, height_cm, front_width, front_height,
                                         side_width, side_height, gender)
