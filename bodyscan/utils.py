"""
Utility functions for the body measurement engine
"""

import sys
import logging
import json
import csv
import yaml
from pathlib import Path
from typing import List, Optional
from datetime import datetime
import numpy as np
import cv2

from .landmarks import Landmark, landmarks_from_dicts
from .plausibility import MeasurementWarning
from .ranges import unit_for

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Setup logging configuration"""

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

def load_image(image_path: str) -> np.ndarray:
    """
    Load an image as an RGB array

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if the file cannot be decoded
    """
    if not Path(image_path).exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    image = cv2.imread(str(image_path))
    if image is None:
        raise ValueError(f"Could not load image: {image_path}")

    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

def load_landmarks(file_path: str) -> List[Landmark]:
    """
    Load a landmark set from a JSON or YAML file

    The file holds either a list of {x, y, z, visibility} mappings or a
    mapping with a "landmarks" list.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Landmark file not found: {file_path}")

    if file_path.suffix.lower() == '.json':
        with open(file_path, 'r') as f:
            data = json.load(f)
    elif file_path.suffix.lower() in ['.yaml', '.yml']:
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    else:
        raise ValueError(f"Unsupported file format: {file_path.suffix}")

    if isinstance(data, dict):
        data = data.get('landmarks')
    if not isinstance(data, list):
        raise ValueError(f"No landmark list found in {file_path}")

    return landmarks_from_dicts(data)

def save_results(result, file_path: str, warnings: Optional[List[MeasurementWarning]] = None) -> Path:
    """
    Save a measurement result to file

    Args:
        result: MeasurementResult to save
        file_path: Output path; .json, .yaml/.yml or .csv (anything else becomes .json)
        warnings: Optional plausibility warnings to include

    Returns:
        The path written
    """

    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    export_data = {
        'timestamp': datetime.now().isoformat(),
        **result.to_dict(),
        'warnings': [
            {'field': w.field, 'message': w.message, 'severity': w.severity}
            for w in (warnings or [])
        ],
    }

    suffix = file_path.suffix.lower()

    if suffix == '.csv':
        with open(file_path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(['Measurement', 'Value', 'Unit'])
            for name, value in result.measurements.items():
                writer.writerow([name.replace('_', ' ').title(), value, unit_for(name)])

    elif suffix in ['.yaml', '.yml']:
        with open(file_path, 'w') as f:
            yaml.safe_dump(export_data, f, default_flow_style=False, indent=2, sort_keys=False)

    else:
        if suffix != '.json':
            file_path = file_path.with_suffix('.json')
        with open(file_path, 'w') as f:
            json.dump(export_data, f, indent=2)

    return file_path

class Timer:
    """Simple timer context manager for performance measurement"""

    def __init__(self, name: str = "Operation"):
        self.name = name
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = datetime.now()
        duration = (self.end_time - self.start_time).total_seconds()
        logging.getLogger(__name__).info(f"{self.name} took {duration:.3f} seconds")

    @property
    def duration(self) -> float:
        """Get duration in seconds"""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0
