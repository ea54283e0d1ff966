"""
Pose detection oracle
=====================

The measurement engine only needs 33 normalized landmarks per photo. Any pose
model can supply them through ``PoseDetector``; ``MediaPipePoseDetector`` is
the production implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from .config import DetectorConfig
from .landmarks import Landmark, POSE_LANDMARK_COUNT

class PoseDetector(ABC):
    """Detects one person's pose landmarks in an image"""

    @abstractmethod
    def detect(self, image: np.ndarray) -> Optional[List[Landmark]]:
        """Return 33 normalized landmarks, or None when no person is found"""

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

class MediaPipePoseDetector(PoseDetector):
    """MediaPipe Pose in static image mode"""

    def __init__(self, config: Optional[DetectorConfig] = None):
        self.config = config or DetectorConfig()
        self.logger = logging.getLogger(__name__)

        # Imported here so the rest of the package works without MediaPipe
        import mediapipe as mp
        self.mp_pose = mp.solutions.pose

        self.pose_detector = self.mp_pose.Pose(
            static_image_mode=True,
            model_complexity=self.config.model_complexity,
            enable_segmentation=self.config.enable_segmentation,
            min_detection_confidence=self.config.min_detection_confidence,
        )

        self.logger.info(f"MediaPipe pose detector initialized (complexity {self.config.model_complexity})")

    def detect(self, image: np.ndarray) -> Optional[List[Landmark]]:
        """
        Detect landmarks in an RGB image

        Args:
            image: RGB image array
        """
        results = self.pose_detector.process(image)

        if not results.pose_landmarks:
            self.logger.info("No person detected")
            return None

        landmarks = [
            Landmark(
                x=float(point.x),
                y=float(point.y),
                z=float(getattr(point, 'z', 0.0)),
                visibility=float(getattr(point, 'visibility', 0.0)),
            )
            for point in results.pose_landmarks.landmark
        ]

        if len(landmarks) < POSE_LANDMARK_COUNT:
            self.logger.warning(f"Pose model returned {len(landmarks)} landmarks, expected {POSE_LANDMARK_COUNT}")
            return None

        return landmarks

    def close(self):
        self.pose_detector.close()
