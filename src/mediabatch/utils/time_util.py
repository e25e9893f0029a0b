"""Time formatting for progress ETAs and the end-of-run summary."""
from datetime import datetime, timedelta, timezone
from typing import Optional


def get_eta_single_file(duration: float, speed: float, position: float) -> str:
    """ETA for one encode from the media duration, encoder speed and current position."""
    remaining_seconds = max(duration - position, 0.0) / speed
    return _get_eta_string(remaining_seconds)


def estimate_remaining(completed: int, total: int, elapsed_seconds: float) -> Optional[float]:
    """
    Estimate the seconds left in a batch as (elapsed / completed) * remaining.

    Returns None until at least one job has completed.
    """
    if completed <= 0:
        return None
    remaining_files = max(total - completed, 0)
    return (elapsed_seconds / completed) * remaining_files


def get_eta_total(completed: int, total: int, elapsed_seconds: float) -> str:
    remaining_seconds = estimate_remaining(completed, total, elapsed_seconds)
    if remaining_seconds is None:
        return "unknown"
    return _get_eta_string(remaining_seconds)


def _get_eta_string(time_in_seconds: float) -> str:
    completion_time = (datetime.now(timezone.utc) + timedelta(
        seconds=time_in_seconds)).strftime("%Y-%m-%d %H:%M:%S")

    eta_hours = int(time_in_seconds // 3600)
    eta_mins = int((time_in_seconds % 3600) // 60)
    eta_secs = int(time_in_seconds % 60)
    if eta_hours > 0:
        formatted_time = f"{eta_hours}h{eta_mins}m{eta_secs}s"
    elif eta_mins > 0:
        formatted_time = f"{eta_mins}m{eta_secs}s"
    else:
        formatted_time = f"{eta_secs}s"

    return f"{completion_time} ({formatted_time})"


def format_elapsed(seconds: float) -> str:
    """
    Render a duration as days, hours, minutes and seconds.

    Leading zero-valued units are omitted and each unit is pluralized only
    when its value is not 1, e.g. ``"1 hour, 0 minutes, 5 seconds"``.
    """
    total = max(int(seconds), 0)
    days, rem = divmod(total, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, secs = divmod(rem, 60)

    units = [("day", days), ("hour", hours), ("minute", minutes), ("second", secs)]
    while len(units) > 1 and units[0][1] == 0:
        units.pop(0)

    return ", ".join(f"{value} {name}{'' if value == 1 else 's'}" for name, value in units)
