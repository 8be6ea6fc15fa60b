"""Line-oriented parser for sensor frequency files.

Each line is split on whitespace. An 8-digit token opens a date context that
lasts until the end of the line, the next date token, or the ``-999``
sentinel. Numeric tokens inside a date context with a value strictly between
0 and 1000 become readings. Invalid date tokens are reported as warnings;
anything else that does not qualify is dropped without comment.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.records import Reading
from services.dates import format_date_key, is_date_token, is_valid_date_token

logger = logging.getLogger(__name__)

SENTINEL = "-999"
MIN_FREQUENCY = 0.0
MAX_FREQUENCY = 1000.0

_LINE_BREAK = re.compile(r"\r?\n")
# Leading ASCII number; trailing characters are ignored.
_NUMBER_PREFIX = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


@dataclass
class ParseResult:
    """Readings and warnings produced by a single parse."""

    readings: List[Reading] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    buckets: Dict[str, List[float]] = field(default_factory=dict)

    def grouped(self) -> Dict[str, List[float]]:
        """Values per date key, omitting dates that collected no readings."""
        return {key: list(values) for key, values in self.buckets.items() if values}


def parse_frequency(token: str) -> Optional[float]:
    """Return the token as a reading value, or None when it is not one."""
    match = _NUMBER_PREFIX.match(token)
    if match is None:
        return None
    value = float(match.group(0))
    # Overflowing exponents give infinity, which fails this comparison.
    if MIN_FREQUENCY < value < MAX_FREQUENCY:
        return value
    return None


def parse_readings(text: str) -> ParseResult:
    result = ParseResult()

    for line_number, line in enumerate(_LINE_BREAK.split(text), start=1):
        tokens = line.split()
        if not tokens:
            continue

        current_key: Optional[str] = None
        for token in tokens:
            if token == SENTINEL:
                break

            if is_date_token(token):
                if is_valid_date_token(token):
                    current_key = format_date_key(token)
                    result.buckets.setdefault(current_key, [])
                else:
                    current_key = None
                    result.warnings.append(
                        f"Line {line_number}: Invalid date skipped ({token})"
                    )
                    logger.debug(
                        "Invalid date token",
                        extra={"line_number": line_number, "token": token},
                    )
                continue

            if current_key is None:
                continue
            value = parse_frequency(token)
            if value is None:
                continue
            result.readings.append(
                Reading(date_key=current_key, frequency=value, line_number=line_number)
            )
            result.buckets[current_key].append(value)

    return result
