"""
Command line processing for photo pairs and landmark files
"""

import logging
from typing import Dict, List, Optional, Tuple

from .body_detector import PoseDetector
from .config import BodyScanConfig
from .landmarks import Landmark
from .measurement_engine import MeasurementEngine, MeasurementResult
from .photo_quality import PhotoQualityReport, check_photo_quality
from .plausibility import MeasurementWarning, check_plausibility
from .ranges import unit_for
from .utils import Timer, load_image, load_landmarks, save_results

class CLIProcessor:
    """Runs detection, measurement and reporting for the command line"""

    def __init__(self, measurement_engine: MeasurementEngine, config: BodyScanConfig,
                 body_detector: Optional[PoseDetector] = None):
        self.measurement_engine = measurement_engine
        self.config = config
        self.body_detector = body_detector
        self.logger = logging.getLogger(__name__)

    def _detect(self, image_path: str, view: str) -> Tuple[List[Landmark], Tuple[int, int], Optional[PhotoQualityReport]]:
        if self.body_detector is None:
            raise RuntimeError("No pose detector configured for photo processing")

        image = load_image(image_path)
        height, width = image.shape[:2]

        report = None
        if self.config.photo_quality.enabled:
            report = check_photo_quality(image, "RGB", self.config.photo_quality)
            for issue in report.issues:
                self.logger.warning(f"{view} photo: {issue}")

        landmarks = self.body_detector.detect(image)
        if landmarks is None:
            raise RuntimeError(f"No person detected in the {view} photo: {image_path}")

        return landmarks, (width, height), report

    def process_photos(self, front_path: str, side_path: Optional[str], height_cm: float,
                       gender: str, output_path: Optional[str] = None):
        """
        Measure a subject from a front photo and an optional side photo

        Returns:
            (result, plausibility warnings, photo quality reports by view)
        """
        self.logger.info(f"Processing photos: front={front_path}, side={side_path}")

        reports: Dict[str, PhotoQualityReport] = {}

        with Timer("Pose detection"):
            front, (front_w, front_h), report = self._detect(front_path, "front")
            if report is not None:
                reports["front"] = report

            side, side_w, side_h = None, None, None
            if side_path:
                side, (side_w, side_h), report = self._detect(side_path, "side")
                if report is not None:
                    reports["side"] = report

        result = self.measurement_engine.calculate_measurements(
            front, side, height_cm, front_w, front_h, side_w, side_h, gender
        )
        warnings = check_plausibility(result.measurements, height_cm, gender)

        if output_path:
            saved = save_results(result, output_path, warnings)
            self.logger.info(f"Results saved to {saved}")

        return result, warnings, reports

    def process_landmarks(self, front_path: str, side_path: Optional[str], height_cm: float,
                          gender: str, front_size: Tuple[int, int],
                          side_size: Optional[Tuple[int, int]] = None,
                          output_path: Optional[str] = None):
        """
        Measure a subject from landmark files produced earlier

        Returns:
            (result, plausibility warnings)
        """
        self.logger.info(f"Processing landmark files: front={front_path}, side={side_path}")

        front = load_landmarks(front_path)
        side = load_landmarks(side_path) if side_path else None
        side_w, side_h = side_size if side_size else front_size

        result = self.measurement_engine.calculate_measurements(
            front, side, height_cm, front_size[0], front_size[1], side_w, side_h, gender
        )
        warnings = check_plausibility(result.measurements, height_cm, gender)

        if output_path:
            saved = save_results(result, output_path, warnings)
            self.logger.info(f"Results saved to {saved}")

        return result, warnings

    def print_results(self, result: MeasurementResult, warnings: List[MeasurementWarning],
                      reports: Optional[Dict[str, PhotoQualityReport]] = None):
        """Print measurement results"""

        print("\n" + "=" * 60)
        print("BODY MEASUREMENTS")
        print("=" * 60)

        for view, report in (reports or {}).items():
            status = "ok" if report.ok else "; ".join(report.issues)
            print(f"{view.title()} photo quality: {status}")

        mode = "front + side" if result.used_side_view else "front only"
        print(f"Views: {mode}    Body shape: {result.body_shape}")
        print(f"Confidence: {result.confidence:.0%}    Landmark quality: {result.landmark_quality:.0%}")
        print("-" * 60)

        for name, value in result.measurements.items():
            print(f"{name.replace('_', ' ').title():<20} {value:>8.1f} {unit_for(name)}")

        if result.repairs:
            print("-" * 60)
            print(f"Consistency repairs: {', '.join(result.repairs)}")

        if warnings:
            print("-" * 60)
            for warning in warnings:
                print(f"[{warning.severity.upper()}] {warning.field}: {warning.message}")

        print("=" * 60)
