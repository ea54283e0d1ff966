import json

import pytest
import yaml

from bodyscan.config import BodyScanConfig, get_config, load_config_from_file, set_config

def test_defaults():
    config = BodyScanConfig()
    assert config.measurement.cross_validation_mode == "single_pass"
    assert config.measurement.min_side_depth_cm == 12.0
    assert config.measurement.depth_floor_cm == 18.0
    assert config.measurement.taper_gap_cm == 0.5
    assert config.photo_quality.enabled
    assert str(config) == "BodyScanConfig(ratios=v1, cross_validation=single_pass)"

def test_load_yaml_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "measurement": {"cross_validation_mode": "fixed_point", "confidence_bounds": [0.5, 0.9]},
        "photo_quality": {"enabled": False},
        "unknown_section": {"x": 1},
    }))

    config = BodyScanConfig(str(path))
    assert config.measurement.cross_validation_mode == "fixed_point"
    assert config.measurement.confidence_bounds == (0.5, 0.9)
    assert config.photo_quality.enabled is False
    assert config.measurement.depth_floor_cm == 18.0

def test_save_and_reload_json(tmp_path):
    config = BodyScanConfig()
    config.measurement.min_side_depth_cm = 10.0
    config.detector.model_complexity = 1
    path = tmp_path / "config.json"
    config.save_config(str(path))

    assert json.loads(path.read_text())["detector"]["model_complexity"] == 1
    reloaded = BodyScanConfig(str(path))
    assert reloaded.to_dict() == config.to_dict()

def test_save_yaml_writes_plain_lists(tmp_path):
    path = tmp_path / "config.yml"
    BodyScanConfig().save_config(str(path))
    data = yaml.safe_load(path.read_text())
    assert data["measurement"]["confidence_bounds"] == [0.55, 0.95]
    assert BodyScanConfig(str(path)).measurement.confidence_bounds == (0.55, 0.95)

@pytest.mark.parametrize("section, values", [
    ("measurement", {"cross_validation_mode": "sometimes"}),
    ("measurement", {"max_cross_validation_iterations": 0}),
    ("measurement", {"taper_gap_cm": 0}),
    ("measurement", {"waist_ratio_bounds": [0.7, 0.4]}),
    ("photo_quality", {"min_brightness": 200, "max_brightness": 100}),
    ("detector", {"model_complexity": 3}),
])
def test_invalid_values_rejected(tmp_path, section, values):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({section: values}))
    with pytest.raises(ValueError):
        BodyScanConfig(str(path))

def test_unsupported_format(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("")
    config = BodyScanConfig()
    with pytest.raises(ValueError):
        config.load_config(str(path))
    with pytest.raises(ValueError):
        config.save_config(str(path))

def test_global_config(tmp_path):
    previous = get_config()
    try:
        with pytest.raises(FileNotFoundError):
            load_config_from_file(str(tmp_path / "missing.yaml"))

        path = tmp_path / "config.json"
        path.write_text(json.dumps({"logging": {"level": "DEBUG"}}))
        loaded = load_config_from_file(str(path))
        assert get_config() is loaded
        assert loaded.logging.level == "DEBUG"
    finally:
        set_config(previous)
