"""
Advisory photo quality gate run before pose detection
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import cv2
import numpy as np

from .config import PhotoQualityConfig

logger = logging.getLogger(__name__)

@dataclass
class PhotoQualityReport:
    brightness: float
    sharpness: float
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

def downscale(image: np.ndarray, max_dimension: int) -> np.ndarray:
    """Shrink so the longer side is at most max_dimension pixels"""
    height, width = image.shape[:2]
    if max(height, width) <= max_dimension:
        return image

    factor = max_dimension / max(height, width)
    new_size = (max(1, int(width * factor)), max(1, int(height * factor)))
    return cv2.resize(image, new_size, interpolation=cv2.INTER_AREA)

def to_gray(image: np.ndarray, color_order: str = "RGB") -> np.ndarray:
    if image.ndim == 2:
        return image
    if image.shape[2] == 4:
        code = cv2.COLOR_RGBA2GRAY if color_order == "RGB" else cv2.COLOR_BGRA2GRAY
    else:
        code = cv2.COLOR_RGB2GRAY if color_order == "RGB" else cv2.COLOR_BGR2GRAY
    return cv2.cvtColor(image, code)

def check_photo_quality(image: np.ndarray, color_order: str = "RGB",
                        config: Optional[PhotoQualityConfig] = None) -> PhotoQualityReport:
    """
    Check brightness and sharpness of a photo

    Args:
        image: 8-bit image array (gray, 3 or 4 channels)
        color_order: "RGB" or "BGR" channel order of color images
        config: Thresholds

    Returns:
        Report with mean luminance, Laplacian variance and any issues found
    """
    config = config or PhotoQualityConfig()

    if image is None or image.size == 0:
        raise ValueError("Empty image")
    if color_order not in ("RGB", "BGR"):
        raise ValueError(f"Unsupported color order: {color_order}")

    gray = to_gray(downscale(image, config.max_dimension), color_order)

    brightness = float(np.mean(gray))
    sharpness = float(cv2.Laplacian(gray, cv2.CV_64F).var())

    report = PhotoQualityReport(brightness=brightness, sharpness=sharpness)

    if brightness < config.min_brightness:
        report.issues.append(f"Photo is too dark (brightness {brightness:.0f}, minimum {config.min_brightness:.0f})")
    elif brightness > config.max_brightness:
        report.issues.append(f"Photo is too bright (brightness {brightness:.0f}, maximum {config.max_brightness:.0f})")

    if sharpness < config.blur_threshold:
        report.issues.append(f"Photo is blurry (sharpness {sharpness:.0f}, minimum {config.blur_threshold:.0f})")

    logger.debug(f"Photo quality: brightness {brightness:.1f}, sharpness {sharpness:.1f}, {len(report.issues)} issues")
    return report
