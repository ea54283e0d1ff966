import argparse
import csv
import json
import logging

import cv2
import numpy as np
import pytest
import yaml

import main as cli
from bodyscan.cli_processor import CLIProcessor
from bodyscan.config import BodyScanConfig, get_config, set_config
from bodyscan.measurement_engine import MeasurementEngine
from bodyscan.plausibility import MeasurementWarning
from bodyscan.utils import load_landmarks, save_results, setup_logging

from conftest import FakePoseDetector, IMAGE_SIZE

@pytest.fixture
def processor(config):
    return CLIProcessor(MeasurementEngine(config), config)

@pytest.fixture
def landmark_files(tmp_path, front_landmarks, side_landmarks):
    front = tmp_path / "front.json"
    front.write_text(json.dumps([lm.to_dict() for lm in front_landmarks]))
    side = tmp_path / "side.yaml"
    side.write_text(yaml.safe_dump({"landmarks": [lm.to_dict() for lm in side_landmarks]}))
    return front, side

@pytest.fixture
def photo(tmp_path):
    board = ((np.indices((IMAGE_SIZE, IMAGE_SIZE)) // 10).sum(axis=0) % 2 * 255).astype(np.uint8)
    path = tmp_path / "front.png"
    cv2.imwrite(str(path), cv2.merge([board, board, board]))
    return path

@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)

@pytest.fixture
def restore_config():
    previous = get_config()
    yield
    set_config(previous)

def test_load_landmarks_json_and_yaml(landmark_files, front_landmarks, side_landmarks):
    front, side = landmark_files
    assert load_landmarks(str(front)) == front_landmarks
    assert load_landmarks(str(side)) == side_landmarks

def test_load_landmarks_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_landmarks(str(tmp_path / "missing.json"))

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"points": []}))
    with pytest.raises(ValueError):
        load_landmarks(str(bad))

    text = tmp_path / "landmarks.txt"
    text.write_text("")
    with pytest.raises(ValueError):
        load_landmarks(str(text))

def test_process_landmarks(processor, landmark_files):
    front, side = landmark_files
    result, warnings = processor.process_landmarks(str(front), str(side), 170, "female",
                                                   (IMAGE_SIZE, IMAGE_SIZE))
    assert result.used_side_view
    assert warnings == []

def test_save_results_formats(processor, landmark_files, tmp_path):
    front, _ = landmark_files
    result, _ = processor.process_landmarks(str(front), None, 170, "female", (IMAGE_SIZE, IMAGE_SIZE))
    warning = MeasurementWarning("bust", "check me", "warning")

    saved = save_results(result, str(tmp_path / "out" / "result.json"), [warning])
    data = json.loads(saved.read_text())
    assert data["measurements"] == result.measurements
    assert data["warnings"] == [{"field": "bust", "message": "check me", "severity": "warning"}]

    saved = save_results(result, str(tmp_path / "result.yaml"))
    assert yaml.safe_load(saved.read_text())["confidence"] == result.confidence

    saved = save_results(result, str(tmp_path / "result.csv"))
    with open(saved, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Measurement", "Value", "Unit"]
    assert rows[-1] == ["Weight", str(result.measurements["weight"]), "kg"]

    assert save_results(result, str(tmp_path / "result.txt")).suffix == ".json"

def test_process_photos_with_detector(config, photo, front_landmarks, side_landmarks):
    detector = FakePoseDetector(front_landmarks, side_landmarks)
    processor = CLIProcessor(MeasurementEngine(config), config, detector)

    result, warnings, reports = processor.process_photos(str(photo), str(photo), 170, "female")

    assert detector.calls == 2
    assert result.used_side_view
    assert set(reports) == {"front", "side"}
    assert reports["front"].ok

def test_process_photos_without_person(config, photo):
    processor = CLIProcessor(MeasurementEngine(config), config, FakePoseDetector(None))
    with pytest.raises(RuntimeError, match="No person detected"):
        processor.process_photos(str(photo), None, 170, "female")

def test_process_photos_needs_detector(processor, photo):
    with pytest.raises(RuntimeError):
        processor.process_photos(str(photo), None, 170, "female")

def test_quality_gate_can_be_disabled(photo, front_landmarks):
    config = BodyScanConfig()
    config.photo_quality.enabled = False
    processor = CLIProcessor(MeasurementEngine(config), config, FakePoseDetector(front_landmarks))
    _, _, reports = processor.process_photos(str(photo), None, 170, "female")
    assert reports == {}

def test_detector_context_manager_closes(front_landmarks):
    with FakePoseDetector(front_landmarks) as detector:
        assert detector.detect(None) == front_landmarks
    assert detector.closed

def test_print_results(processor, landmark_files, capsys):
    front, _ = landmark_files
    result, _ = processor.process_landmarks(str(front), None, 170, "female", (IMAGE_SIZE, IMAGE_SIZE))
    processor.print_results(result, [MeasurementWarning("hips", "Hips look off", "critical")])
    out = capsys.readouterr().out
    assert "BODY MEASUREMENTS" in out
    assert "Arm Length" in out
    assert "[CRITICAL] hips: Hips look off" in out

def test_setup_logging_writes_file(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "bodyscan.log"
    setup_logging("DEBUG", str(log_file))
    logging.getLogger("bodyscan.test").debug("hello")
    assert log_file.exists()
    assert logging.getLogger().level == logging.DEBUG

def test_parse_size():
    assert cli.parse_size("640x480") == (640, 480)
    assert cli.parse_size(None) is None
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_size("wide")

def test_main_landmarks_mode(landmark_files, tmp_path, capsys, restore_logging, restore_config):
    front, side = landmark_files
    output = tmp_path / "result.json"
    code = cli.main([
        "--mode", "landmarks", "--front", str(front), "--side", str(side),
        "--front-size", "1000x1000", "--height", "170", "--output", str(output),
        "--log-level", "WARNING",
    ])
    assert code == 0
    assert "BODY MEASUREMENTS" in capsys.readouterr().out
    assert json.loads(output.read_text())["used_side_view"] is True

def test_main_reports_bad_height(landmark_files, capsys, restore_logging, restore_config):
    front, _ = landmark_files
    code = cli.main([
        "--mode", "landmarks", "--front", str(front), "--front-size", "1000x1000",
        "--height", "0", "--log-level", "ERROR",
    ])
    assert code == 1
    assert "Measurement failed" in capsys.readouterr().out

def test_main_reports_missing_config(landmark_files, tmp_path, restore_config):
    front, _ = landmark_files
    code = cli.main([
        "--mode", "landmarks", "--front", str(front), "--front-size", "1000x1000",
        "--height", "170", "--config", str(tmp_path / "missing.yaml"),
    ])
    assert code == 2
