"""
Pose landmark types shared by the detector and the measurement engine
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, List, Sequence, Union

POSE_LANDMARK_COUNT = 33

class PoseLandmark(IntEnum):
    """Indices of the MediaPipe 33-point pose landmarks used for measurement"""
    NOSE = 0
    LEFT_EAR = 7
    RIGHT_EAR = 8
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32

# Landmarks averaged for the confidence score
KEY_LANDMARKS = (
    PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER,
    PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP,
    PoseLandmark.LEFT_KNEE, PoseLandmark.RIGHT_KNEE,
    PoseLandmark.LEFT_ANKLE, PoseLandmark.RIGHT_ANKLE,
    PoseLandmark.LEFT_ELBOW, PoseLandmark.RIGHT_ELBOW,
    PoseLandmark.LEFT_WRIST, PoseLandmark.RIGHT_WRIST,
)

class BodyGender(Enum):
    """Selects the ratio table and plausible ranges"""
    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: Union[str, 'BodyGender']) -> 'BodyGender':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown gender: {value!r} (expected 'male' or 'female')")

@dataclass(frozen=True)
class Landmark:
    """A detected body keypoint in normalized image coordinates"""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Landmark':
        visibility = data.get('visibility')
        return cls(
            x=float(data['x']),
            y=float(data['y']),
            z=float(data.get('z') or 0.0),
            visibility=float(visibility) if visibility is not None else 0.0,
        )

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'z': self.z, 'visibility': self.visibility}

def validate_landmarks(landmarks: Sequence[Landmark], view: str = "front") -> List[Landmark]:
    """
    Check that a landmark set covers the full 33-point topology

    Raises:
        ValueError: if the set is missing or too short
    """
    if landmarks is None:
        raise ValueError(f"No {view} landmarks supplied")

    landmarks = list(landmarks)
    if len(landmarks) < POSE_LANDMARK_COUNT:
        raise ValueError(
            f"Expected {POSE_LANDMARK_COUNT} {view} landmarks, got {len(landmarks)}"
        )
    return landmarks

def landmarks_from_dicts(items: Sequence[Dict[str, Any]]) -> List[Landmark]:
    return [Landmark.from_dict(item) for item in items]
