import dataclasses

import pytest

from bodyscan.body_ratios import (
    BODY_RATIOS_V1, RATIO_BOUNDS, BodyShape, adjust_ratios, classify_body_shape, get_ratio_table,
)
from bodyscan.landmarks import BodyGender

FEMALE = BODY_RATIOS_V1[BodyGender.FEMALE]
MALE = BODY_RATIOS_V1[BodyGender.MALE]

def test_tables_per_gender():
    assert get_ratio_table("female") is FEMALE
    assert get_ratio_table(BodyGender.MALE, "v1") is MALE
    assert FEMALE.bust_from_shoulder == 2.65
    assert MALE.bust_from_shoulder == 2.52
    assert FEMALE.version == MALE.version == "v1"

def test_unknown_table_version():
    with pytest.raises(ValueError):
        get_ratio_table("female", "v0")

def test_base_tables_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        FEMALE.bust_from_shoulder = 3.0

@pytest.mark.parametrize("shoulder, hip, gender, shape", [
    (80, 100, "female", BodyShape.PEAR),
    (100, 100, "female", BodyShape.HOURGLASS),
    (108, 100, "female", BodyShape.RECTANGLE),
    (130, 100, "female", BodyShape.INVERTED_TRIANGLE),
    (130, 100, "male", BodyShape.V_SHAPE),
    (110, 100, "male", BodyShape.RECTANGLE),
    (90, 100, "male", BodyShape.STOCKY),
    (0, 100, "male", BodyShape.UNKNOWN),
    (100, 0, "female", BodyShape.UNKNOWN),
])
def test_classify_body_shape(shoulder, hip, gender, shape):
    assert classify_body_shape(shoulder, hip, gender) == shape

def test_zero_width_returns_base_table():
    adjusted, shape = adjust_ratios(FEMALE, 0, 120, "female")
    assert shape == BodyShape.UNKNOWN
    assert adjusted is FEMALE

def test_pear_widens_hips_and_narrows_bust():
    adjusted, shape = adjust_ratios(FEMALE, 75, 100, "female")
    assert shape == BodyShape.PEAR
    assert adjusted.hips_from_hip_width == pytest.approx(FEMALE.hips_from_hip_width * 1.08)
    assert adjusted.thigh_from_hip_width == pytest.approx(FEMALE.thigh_from_hip_width * 1.08)
    assert adjusted.bust_from_shoulder == pytest.approx(FEMALE.bust_from_shoulder * 0.95)
    assert adjusted.waist_from_hip_width == FEMALE.waist_from_hip_width

def test_adjustment_scales_with_distance_from_threshold():
    mild, _ = adjust_ratios(FEMALE, 90, 100, "female")
    strong, _ = adjust_ratios(FEMALE, 80, 100, "female")
    assert FEMALE.hips_from_hip_width < mild.hips_from_hip_width < strong.hips_from_hip_width

def test_hourglass_tightens_waist():
    adjusted, _ = adjust_ratios(FEMALE, 100, 100, "female")
    assert adjusted.waist_from_hip_width == pytest.approx(FEMALE.waist_from_hip_width * 0.95)
    assert adjusted.bust_depth_ratio == pytest.approx(FEMALE.bust_depth_ratio * 1.03)

def test_inverted_triangle_shifts_bust_over_hips():
    adjusted, _ = adjust_ratios(FEMALE, 167, 100, "female")
    assert adjusted.bust_from_shoulder == pytest.approx(FEMALE.bust_from_shoulder * 1.06)
    assert adjusted.hip_half_width_ratio == pytest.approx(FEMALE.hip_half_width_ratio * 0.94)

def test_v_shape_and_stocky():
    v_shape, shape = adjust_ratios(MALE, 167, 100, "male")
    assert shape == BodyShape.V_SHAPE
    assert v_shape.waist_from_hip_width == pytest.approx(MALE.waist_from_hip_width * 0.94)

    stocky, shape = adjust_ratios(MALE, 80, 100, "male")
    assert shape == BodyShape.STOCKY
    assert stocky.waist_from_hip_width == pytest.approx(MALE.waist_from_hip_width * 1.06)
    assert stocky.thigh_from_hip_width == pytest.approx(MALE.thigh_from_hip_width * 1.06)
    assert stocky.bust_from_shoulder == MALE.bust_from_shoulder

def test_adjustment_never_mutates_base():
    before = FEMALE.to_dict()
    adjust_ratios(FEMALE, 75, 100, "female")
    adjust_ratios(FEMALE, 167, 100, "female")
    assert FEMALE.to_dict() == before

def test_adjusted_values_stay_in_bounds():
    base = dataclasses.replace(FEMALE, bust_from_shoulder=3.15)
    adjusted, _ = adjust_ratios(base, 167, 100, "female")
    assert adjusted.bust_from_shoulder == RATIO_BOUNDS["bust_from_shoulder"][1]
