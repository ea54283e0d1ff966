"""
Height-referenced scale calibration
===================================

Converts pixel distances to centimeters using the subject's known height and
the vertical span between the estimated head crown and the feet.
"""

import logging
from typing import Optional, Sequence

from .config import CalibrationConfig
from .geometry import mid_y
from .landmarks import Landmark, PoseLandmark as P

class ScaleCalibrator:
    """Derives a centimeters-per-pixel factor from a known height"""

    def __init__(self, config: Optional[CalibrationConfig] = None):
        self.config = config or CalibrationConfig()
        self.logger = logging.getLogger(__name__)

    def estimate_head_top(self, landmarks: Sequence[Landmark]) -> float:
        """Estimate the normalized y of the head crown"""
        nose = landmarks[P.NOSE]
        left_ear = landmarks[P.LEFT_EAR]
        right_ear = landmarks[P.RIGHT_EAR]
        ear = left_ear if left_ear.visibility >= right_ear.visibility else right_ear

        ear_offset = nose.y - ear.y
        if ear.visibility > self.config.visibility_threshold and ear_offset > self.config.min_ear_nose_offset:
            head_top = ear.y - ear_offset * self.config.head_crown_ear_factor
        else:
            # Ears unusable, fall back to the nose-to-shoulder distance
            shoulder_mid_y = mid_y(landmarks[P.LEFT_SHOULDER], landmarks[P.RIGHT_SHOULDER])
            head_top = nose.y - (shoulder_mid_y - nose.y) * self.config.head_crown_shoulder_factor

        return max(0.0, head_top)

    def estimate_feet(self, landmarks: Sequence[Landmark]) -> float:
        """Lowest on-screen y among the ankles and heels"""
        return max(
            landmarks[P.LEFT_ANKLE].y,
            landmarks[P.RIGHT_ANKLE].y,
            landmarks[P.LEFT_HEEL].y,
            landmarks[P.RIGHT_HEEL].y,
        )

    def body_height_px(self, landmarks: Sequence[Landmark], image_height: float) -> float:
        return (self.estimate_feet(landmarks) - self.estimate_head_top(landmarks)) * image_height

    def estimate_scale(self, landmarks: Sequence[Landmark], image_width: float,
                       image_height: float, height_cm: float,
                       fallback: float = 1.0) -> float:
        """
        Centimeters per pixel for one photo

        Args:
            landmarks: 33 normalized pose landmarks
            image_width: Photo width in pixels
            image_height: Photo height in pixels
            height_cm: Subject's true height
            fallback: Scale returned when the body span is degenerate
        """
        height_px = self.body_height_px(landmarks, image_height)

        if height_px <= 0:
            self.logger.warning(
                f"Degenerate body span ({height_px:.1f}px in a {image_width:.0f}x{image_height:.0f} image), "
                f"using fallback scale {fallback:.4f}"
            )
            return fallback

        scale = height_cm / height_px
        self.logger.debug(f"Calibration: {height_px:.1f}px body height -> {scale:.4f} cm/px")
        return scale
