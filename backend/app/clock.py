"""Wall-clock access for the chat core."""
import time
from datetime import datetime


def format_time(ms: int) -> str:
    """Format epoch milliseconds as a local ``HH:MM:SS`` string."""
    return datetime.fromtimestamp(ms / 1000).strftime("%H:%M:%S")


class SystemClock:
    """Clock backed by the system time."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)

    def format_time(self, ms: int) -> str:
        return format_time(ms)
