"""
Duration reporting for long-running tasks.

Statistics captures a start time and logs messages of the form
"<message> (took <readable time>)".
"""

import logging
import time
from typing import Optional


def get_readable_time(duration_ms: float) -> str:
    """
    Format a duration for humans.

    Args:
        duration_ms: Duration in milliseconds

    Returns:
        "H:MM:SS" for durations of a second or more, "N ms" otherwise.
        Durations of a day or more are prefixed with "<days> day(s) ".
    """
    duration_ms = max(0, int(duration_ms))
    if duration_ms < 1000:
        return f"{duration_ms} ms"

    total_seconds = duration_ms // 1000
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    readable = f"{hours}:{minutes:02d}:{seconds:02d}"
    if days:
        readable = f"{days} day{'s' if days > 1 else ''} {readable}"
    return readable


class Statistics:
    """Logs how long a task took since this object was created."""

    def __init__(self):
        self.start_time = time.monotonic()

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000

    def report(self, logger: logging.Logger, msg: str, level: int = logging.INFO,
               duration_ms: Optional[float] = None) -> bool:
        """
        Log a message with the elapsed time if the level is enabled.

        Args:
            logger: Logger to write to
            msg: Message text
            level: Logging level
            duration_ms: Duration to report, defaults to the time since creation

        Returns:
            Whether anything was logged
        """
        if not logger.isEnabledFor(level):
            return False
        elapsed = self.elapsed_ms if duration_ms is None else duration_ms
        logger.log(level, f"{msg} (took {get_readable_time(elapsed)})")
        return True
