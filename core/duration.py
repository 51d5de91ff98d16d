"""
Duration normalization for Mixcloud audio lengths

Mixcloud reports `audio_length` either as integer seconds or as a
"H:MM:SS" / "MM:SS" timecode. Malformed values never abort ingestion of
an episode; they normalize to 0.
"""

from typing import Optional, Union


def normalize_duration(value: Optional[Union[int, float, str]]) -> int:
    """
    Convert a timecode string or numeric duration to integer seconds

    Args:
        value: Seconds as int/float, or a "H:MM:SS" / "MM:SS" string

    Returns:
        Non-negative integer seconds (0 for anything unparseable)
    """
    # bool is an int subclass but never a duration
    if isinstance(value, bool) or value is None:
        return 0

    if isinstance(value, int):
        return max(value, 0)

    if isinstance(value, float):
        return max(int(value), 0)

    if not isinstance(value, str):
        return 0

    parts = value.strip().split(':')
    if not all(part.strip().isdigit() for part in parts):
        return 0

    numbers = [int(part) for part in parts]
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds
    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds

    return 0
