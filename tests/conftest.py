import pytest

from bodyscan.body_detector import PoseDetector
from bodyscan.config import BodyScanConfig
from bodyscan.landmarks import Landmark, PoseLandmark as P

IMAGE_SIZE = 1000

# Upright subject facing the camera, arms relaxed, feet slightly apart
FRONT_POINTS = {
    P.NOSE: (0.50, 0.10, 0.99),
    P.LEFT_EAR: (0.53, 0.09, 0.90),
    P.RIGHT_EAR: (0.47, 0.09, 0.90),
    P.LEFT_SHOULDER: (0.60, 0.22, 0.95),
    P.RIGHT_SHOULDER: (0.40, 0.22, 0.95),
    P.LEFT_ELBOW: (0.63, 0.37, 0.90),
    P.RIGHT_ELBOW: (0.37, 0.37, 0.90),
    P.LEFT_WRIST: (0.64, 0.50, 0.85),
    P.RIGHT_WRIST: (0.36, 0.50, 0.85),
    P.LEFT_HIP: (0.56, 0.50, 0.90),
    P.RIGHT_HIP: (0.44, 0.50, 0.90),
    P.LEFT_KNEE: (0.55, 0.70, 0.90),
    P.RIGHT_KNEE: (0.45, 0.70, 0.90),
    P.LEFT_ANKLE: (0.54, 0.90, 0.85),
    P.RIGHT_ANKLE: (0.46, 0.90, 0.85),
    P.LEFT_HEEL: (0.54, 0.92, 0.80),
    P.RIGHT_HEEL: (0.46, 0.92, 0.80),
    P.LEFT_FOOT_INDEX: (0.55, 0.93, 0.80),
    P.RIGHT_FOOT_INDEX: (0.45, 0.93, 0.80),
}

# Same subject in profile, facing right; the right side is occluded
SIDE_POINTS = {
    P.NOSE: (0.56, 0.10, 0.95),
    P.LEFT_EAR: (0.50, 0.09, 0.90),
    P.RIGHT_EAR: (0.50, 0.09, 0.20),
    P.LEFT_SHOULDER: (0.50, 0.22, 0.90),
    P.RIGHT_SHOULDER: (0.51, 0.22, 0.40),
    P.LEFT_ELBOW: (0.48, 0.41, 0.85),
    P.RIGHT_ELBOW: (0.49, 0.41, 0.25),
    P.LEFT_WRIST: (0.50, 0.55, 0.80),
    P.RIGHT_WRIST: (0.50, 0.55, 0.20),
    P.LEFT_HIP: (0.46, 0.50, 0.90),
    P.RIGHT_HIP: (0.47, 0.50, 0.20),
    P.LEFT_KNEE: (0.58, 0.70, 0.90),
    P.RIGHT_KNEE: (0.57, 0.70, 0.20),
    P.LEFT_ANKLE: (0.50, 0.90, 0.85),
    P.RIGHT_ANKLE: (0.50, 0.90, 0.30),
    P.LEFT_HEEL: (0.47, 0.92, 0.80),
    P.RIGHT_HEEL: (0.47, 0.92, 0.20),
}

# Wide stance with only the torso and ankles placed
SCENARIO_POINTS = {
    P.NOSE: (0.50, 0.15, 0.90),
    P.LEFT_SHOULDER: (0.70, 0.30, 0.90),
    P.RIGHT_SHOULDER: (0.30, 0.30, 0.90),
    P.LEFT_HIP: (0.65, 0.55, 0.90),
    P.RIGHT_HIP: (0.35, 0.55, 0.90),
    P.LEFT_ANKLE: (0.70, 0.95, 0.90),
    P.RIGHT_ANKLE: (0.30, 0.95, 0.90),
}

def make_landmarks(points, default=(0.5, 0.5, 0.0)):
    """Build a 33-point landmark list from {index: (x, y, visibility)}"""
    landmarks = [Landmark(default[0], default[1], 0.0, default[2]) for _ in range(33)]
    for index, (x, y, visibility) in points.items():
        landmarks[index] = Landmark(x, y, 0.0, visibility)
    return landmarks

class FakePoseDetector(PoseDetector):
    """Returns canned landmarks in call order"""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0
        self.closed = False

    def detect(self, image):
        result = self.results[self.calls]
        self.calls += 1
        return result

    def close(self):
        self.closed = True

@pytest.fixture
def front_landmarks():
    return make_landmarks(FRONT_POINTS)

@pytest.fixture
def side_landmarks():
    return make_landmarks(SIDE_POINTS)

@pytest.fixture
def scenario_landmarks():
    return make_landmarks(SCENARIO_POINTS)

@pytest.fixture
def config():
    return BodyScanConfig()
