"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for values that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    matching = config_dict.get("matching", {})
    if not isinstance(matching, dict):
        return warning_messages

    # A zero window turns a soft range into a hard cut-off
    for key in ("budget_flexibility", "area_room_window"):
        value = matching.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
            warning_messages.append(
                f"matching.{key} is 0: any value outside the range scores 0"
            )

    for key in ("budget_flexibility", "area_room_window", "reverse_budget_window"):
        value = matching.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0.5:
            warning_messages.append(
                f"Large matching.{key} ({value}) makes far-off candidates score highly"
            )

    type_weight = matching.get("type_weight")
    if isinstance(type_weight, (int, float)) and type_weight > 0.5:
        warning_messages.append(
            f"matching.type_weight ({type_weight}) outweighs all user-weighted categories combined"
        )

    max_workers = matching.get("max_workers")
    if isinstance(max_workers, int) and max_workers > 16:
        warning_messages.append(
            f"matching.max_workers ({max_workers}) rarely helps: scoring is CPU-bound"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
