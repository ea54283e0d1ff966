"""
Anthropometric body measurement estimation from pose landmarks
"""

from .body_ratios import BODY_RATIOS_V1, BodyRatioSet, BodyShape, adjust_ratios, get_ratio_table
from .config import BodyScanConfig, get_config, load_config_from_file, set_config
from .landmarks import BodyGender, Landmark, PoseLandmark
from .measurement_engine import MeasurementEngine, MeasurementResult, calculate_measurements
from .plausibility import MeasurementWarning, check_plausibility
from .ranges import PlausibleRange, get_plausible_ranges

__version__ = "1.0.0"

__all__ = [
    "BODY_RATIOS_V1",
    "BodyGender",
    "BodyRatioSet",
    "BodyScanConfig",
    "BodyShape",
    "Landmark",
    "MeasurementEngine",
    "MeasurementResult",
    "MeasurementWarning",
    "PlausibleRange",
    "PoseLandmark",
    "adjust_ratios",
    "calculate_measurements",
    "check_plausibility",
    "get_config",
    "get_plausible_ranges",
    "get_ratio_table",
    "load_config_from_file",
    "set_config",
]
