#!/usr/bin/env python3
"""Check config.example.yaml against the settings propmatch understands."""

import sys
from pathlib import Path

import yaml

MATCHING_KEYS = {
    "budget_flexibility": (0.0, 1.0),
    "area_room_window": (0.0, 1.0),
    "state_match_score": (0, 100),
    "postal_code_proximity": (0, 99999),
    "type_weight": (0.0, 0.999),
    "reverse_budget_window": (0.0, 1.0),
    "max_workers": (1, 64),
    "parallel_threshold": (1, None),
}
LOGGING_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
LOGGING_FORMATS = {"json", "key-value"}


def verify_config_structure(config_file: Path = Path("config.example.yaml")) -> bool:
    """Verify the example configuration has known keys with in-range values."""
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return False

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        print(f"✗ Failed to parse {config_file}: {e}")
        return False

    errors = []

    unknown = set(config) - {"matching", "logging"}
    if unknown:
        errors.append(f"Unknown top-level keys: {', '.join(sorted(unknown))}")

    matching = config.get("matching", {})
    if not isinstance(matching, dict):
        errors.append("'matching' must be a dictionary")
        matching = {}
    for key, value in matching.items():
        if key not in MATCHING_KEYS:
            errors.append(f"Unknown matching key: {key}")
            continue
        low, high = MATCHING_KEYS[key]
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            errors.append(f"matching.{key} must be a number")
        elif value < low or (high is not None and value > high):
            errors.append(f"matching.{key}={value} is out of range")

    logging_section = config.get("logging", {})
    if not isinstance(logging_section, dict):
        errors.append("'logging' must be a dictionary")
        logging_section = {}
    if "level" in logging_section and logging_section["level"] not in LOGGING_LEVELS:
        errors.append(f"logging.level must be one of {', '.join(sorted(LOGGING_LEVELS))}")
    if "format" in logging_section and logging_section["format"] not in LOGGING_FORMATS:
        errors.append(f"logging.format must be one of {', '.join(sorted(LOGGING_FORMATS))}")

    if errors:
        print(f"✗ {config_file} validation failed:")
        for error in errors:
            print(f"  - {error}")
        return False

    print(f"✓ {config_file} structure is valid")
    print(f"  - {len(matching)} matching settings")
    print(f"  - Log level: {logging_section.get('level', 'not set')}")
    return True


if __name__ == "__main__":
    success = verify_config_structure()
    sys.exit(0 if success else 1)
