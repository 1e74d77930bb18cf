"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    # Third-party HTTP and browser driver chatter stays out of verbose runs
    for name in ("urllib3", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


def non_negative_int(value: str, field_name: str = "value") -> int:
    """Parse a non-negative integer for argparse arguments.

    Raises:
        argparse.ArgumentTypeError: If the value is not a non-negative integer.
    """
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{field_name} must be an integer") from exc
    if number < 0:
        raise argparse.ArgumentTypeError(f"{field_name} must not be negative")
    return number
