"""
Duration utility functions.

This module provides utilities for:
- Parsing durations given as seconds or ISO-8601 strings ("PT3M33S")
"""

import re
from typing import Optional, Union


ISO_8601_DURATION = re.compile(
    r'^P(?:(?P<days>\d+(?:\.\d+)?)D)?'
    r'(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?'
    r'(?:(?P<minutes>\d+(?:\.\d+)?)M)?'
    r'(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$',
    re.IGNORECASE,
)


def parse_iso8601_duration(value: str) -> Optional[int]:
    """
    Convert an ISO-8601 duration to whole seconds.

    Examples:
        "PT3M33S" -> 213
        "PT1H"    -> 3600
        "P1DT2S"  -> 86402
    """
    match = ISO_8601_DURATION.match(value.strip())
    if not match or value.strip().upper() in ('P', 'PT'):
        return None
    parts = {k: float(v) for k, v in match.groupdict().items() if v}
    total = (
        parts.get('days', 0) * 86400
        + parts.get('hours', 0) * 3600
        + parts.get('minutes', 0) * 60
        + parts.get('seconds', 0)
    )
    return int(round(total))


def parse_duration(value: Union[int, float, str, None]) -> Optional[int]:
    """
    Auto-detect and parse a duration to whole seconds.
    Supports: numbers, numeric strings "213" / "213.4", and ISO-8601 "PT3M33S".
    Returns None for missing or unparseable values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(round(value)) if value >= 0 else None

    value = value.strip()
    if not value:
        return None
    if value[0] in 'Pp':
        return parse_iso8601_duration(value)
    try:
        seconds = float(value)
    except ValueError:
        return None
    return int(round(seconds)) if seconds >= 0 else None
