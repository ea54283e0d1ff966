"""
Configuration Management for the Body Measurement Engine
========================================================

Section dataclasses for calibration, estimation, photo quality, pose
detection and logging, aggregated by ``BodyScanConfig`` which can be loaded
from and saved to YAML or JSON files.
"""

import os
import yaml
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict
from enum import Enum

class CrossValidationMode(Enum):
    """How the anatomical consistency rules are applied"""
    SINGLE_PASS = "single_pass"
    FIXED_POINT = "fixed_point"

@dataclass
class CalibrationConfig:
    """Pixel to centimeter calibration settings"""
    visibility_threshold: float = 0.3
    head_crown_ear_factor: float = 2.2
    min_ear_nose_offset: float = 0.005
    head_crown_shoulder_factor: float = 0.55

@dataclass
class MeasurementConfig:
    """Measurement estimation settings"""
    ratio_table_version: str = "v1"
    adjust_for_body_shape: bool = True

    # Side-view depth handling
    side_visibility_threshold: float = 0.3
    min_side_depth_cm: float = 12.0
    depth_floor_cm: float = 18.0

    # Waist height refinement from the side elbow
    waist_ratio_elbow_correction: float = 0.05
    waist_ratio_bounds: tuple = (0.40, 0.65)

    # Weight estimate
    population_waist_to_height: float = 0.45

    # Confidence scoring
    side_photo_bonus: float = 0.12
    visibility_weight: float = 0.85
    confidence_bounds: tuple = (0.55, 0.95)

    # Consistency repair
    cross_validation_mode: str = "single_pass"
    max_cross_validation_iterations: int = 5
    # Minimum separation kept between adjacent lower leg girths
    taper_gap_cm: float = 0.5

    measurement_precision_digits: int = 1

@dataclass
class PhotoQualityConfig:
    """Advisory photo quality gate thresholds"""
    enabled: bool = True
    max_dimension: int = 640
    min_brightness: float = 40.0
    max_brightness: float = 220.0
    blur_threshold: float = 100.0

@dataclass
class DetectorConfig:
    """MediaPipe pose detector settings"""
    model_complexity: int = 2
    min_detection_confidence: float = 0.5
    enable_segmentation: bool = False

@dataclass
class LoggingConfig:
    """Logging settings"""
    level: str = "INFO"
    log_file: Optional[str] = None

class BodyScanConfig:
    """Configuration for the body measurement engine"""

    SECTIONS = ['calibration', 'measurement', 'photo_quality', 'detector', 'logging']

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration"""
        self.config_path = config_path

        self.calibration = CalibrationConfig()
        self.measurement = MeasurementConfig()
        self.photo_quality = PhotoQualityConfig()
        self.detector = DetectorConfig()
        self.logging = LoggingConfig()

        if config_path and os.path.exists(config_path):
            self.load_config(config_path)

        self._validate_config()

    def _validate_config(self):
        """Validate configuration settings"""

        valid_modes = [m.value for m in CrossValidationMode]
        if self.measurement.cross_validation_mode not in valid_modes:
            raise ValueError(f"Invalid cross validation mode: {self.measurement.cross_validation_mode}")

        if self.measurement.max_cross_validation_iterations < 1:
            raise ValueError("max_cross_validation_iterations must be at least 1")

        if self.measurement.taper_gap_cm <= 0:
            raise ValueError("taper_gap_cm must be positive")

        low, high = self.measurement.waist_ratio_bounds
        if not 0.0 < low < high < 1.0:
            raise ValueError("Invalid waist ratio bounds")

        low, high = self.measurement.confidence_bounds
        if not 0.0 <= low <= high <= 1.0:
            raise ValueError("Invalid confidence bounds")

        if self.measurement.min_side_depth_cm < 0 or self.measurement.depth_floor_cm <= 0:
            raise ValueError("Side depth thresholds must be positive")

        if not 0.0 <= self.calibration.visibility_threshold <= 1.0:
            raise ValueError("Visibility threshold must be within [0, 1]")

        if self.photo_quality.min_brightness >= self.photo_quality.max_brightness:
            raise ValueError("Invalid brightness range")

        if self.photo_quality.max_dimension <= 0:
            raise ValueError("max_dimension must be positive")

        if self.detector.model_complexity not in (0, 1, 2):
            raise ValueError(f"Invalid model complexity: {self.detector.model_complexity}")

    def load_config(self, config_path: str):
        """Load configuration from file"""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        elif config_path.suffix.lower() == '.json':
            with open(config_path, 'r') as f:
                config_data = json.load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

        for section_name, section_data in config_data.items():
            if section_name in self.SECTIONS and isinstance(section_data, dict):
                self._update_config_section(section_name, section_data)

        self._validate_config()

    def _update_config_section(self, section_name: str, config_data: Dict[str, Any]):
        """Update a configuration section"""
        section = getattr(self, section_name)

        for key, value in config_data.items():
            if hasattr(section, key):
                current_value = getattr(section, key)
                # YAML and JSON have no tuples
                if isinstance(current_value, tuple) and isinstance(value, list):
                    value = tuple(value)
                setattr(section, key, value)

    def save_config(self, config_path: str):
        """Save configuration to file"""
        config_data = self.to_dict()
        config_path = Path(config_path)

        if config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'w') as f:
                yaml.safe_dump(_lists_for_tuples(config_data), f, default_flow_style=False, indent=2)
        elif config_path.suffix.lower() == '.json':
            with open(config_path, 'w') as f:
                json.dump(config_data, f, indent=2)
        else:
            raise ValueError(f"Unsupported configuration file format: {config_path.suffix}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return {name: asdict(getattr(self, name)) for name in self.SECTIONS}

    def __str__(self) -> str:
        return f"BodyScanConfig(ratios={self.measurement.ratio_table_version}, " \
               f"cross_validation={self.measurement.cross_validation_mode})"

    def __repr__(self) -> str:
        return self.__str__()

def _lists_for_tuples(data):
    if isinstance(data, dict):
        return {key: _lists_for_tuples(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_lists_for_tuples(value) for value in data]
    return data

# Global configuration instance
_global_config = None

def get_config() -> BodyScanConfig:
    """Get global configuration instance"""
    global _global_config
    if _global_config is None:
        _global_config = BodyScanConfig()
    return _global_config

def set_config(config: BodyScanConfig):
    """Set global configuration instance"""
    global _global_config
    _global_config = config

def load_config_from_file(config_path: str) -> BodyScanConfig:
    """Load configuration from file and set as global"""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    config = BodyScanConfig(config_path)
    set_config(config)
    return config
