#!/usr/bin/env python3
"""
Body Measurement Estimation - Command Line
==========================================

Estimates tailoring measurements from a front photo (and optional side photo)
or from landmark files captured earlier, using the subject's height as the
reference scale.
"""

import sys
import logging
import argparse
from typing import Optional, Tuple

from bodyscan.config import BodyScanConfig, load_config_from_file, set_config
from bodyscan.cli_processor import CLIProcessor
from bodyscan.measurement_engine import MeasurementEngine
from bodyscan.utils import setup_logging

def parse_size(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse WIDTHxHEIGHT"""
    if value is None:
        return None
    try:
        width, height = (int(part) for part in value.lower().split('x', 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got {value!r}")
    return width, height

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Body measurement estimation from pose landmarks')
    parser.add_argument('--mode', choices=['photos', 'landmarks'], default='photos',
                        help='Read photos (runs pose detection) or landmark files')
    parser.add_argument('--front', type=str, required=True, help='Front photo or front landmark file')
    parser.add_argument('--side', type=str, help='Side photo or side landmark file')
    parser.add_argument('--height', type=float, required=True, help='Subject height in cm')
    parser.add_argument('--gender', choices=['female', 'male'], default='female')
    parser.add_argument('--front-size', type=parse_size, help='Front image size WIDTHxHEIGHT (landmarks mode)')
    parser.add_argument('--side-size', type=parse_size, help='Side image size WIDTHxHEIGHT (landmarks mode)')
    parser.add_argument('--config', type=str, help='YAML or JSON configuration file')
    parser.add_argument('--output', type=str, help='Output file (.json, .yaml or .csv)')
    parser.add_argument('--log-level', type=str, help='Override the configured log level')
    return parser

def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config_from_file(args.config) if args.config else BodyScanConfig()
    except (ValueError, FileNotFoundError) as e:
        print(f"Configuration error: {e}")
        return 2
    set_config(config)

    setup_logging(args.log_level or config.logging.level, config.logging.log_file)
    logger = logging.getLogger(__name__)

    engine = MeasurementEngine(config)

    try:
        if args.mode == 'landmarks':
            if args.front_size is None:
                parser.error("--front-size is required in landmarks mode")

            processor = CLIProcessor(engine, config)
            result, warnings = processor.process_landmarks(
                args.front, args.side, args.height, args.gender,
                args.front_size, args.side_size, args.output
            )
            processor.print_results(result, warnings)

        else:
            from bodyscan.body_detector import MediaPipePoseDetector

            with MediaPipePoseDetector(config.detector) as detector:
                processor = CLIProcessor(engine, config, detector)
                result, warnings, reports = processor.process_photos(
                    args.front, args.side, args.height, args.gender, args.output
                )
            processor.print_results(result, warnings, reports)

    except (ValueError, FileNotFoundError, RuntimeError) as e:
        logger.error(f"Measurement failed: {e}")
        print(f"Measurement failed: {e}")
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
