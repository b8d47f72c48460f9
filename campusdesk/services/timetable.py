"""Weekly timetable shape shared by the assignment and workload services"""
from typing import Dict, List, Optional, Any

DAYS: List[str] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

TIME_SLOTS: List[str] = [
    "9:10 - 10:00",
    "10:00 - 10:50",
    "10:50 - 11:40",
    "11:40 - 12:30",
    # lunch 12:30 - 1:30
    "1:30 - 2:20",
    "2:20 - 3:10",
    "3:10 - 4:00",
]

PERIODS_PER_DAY = len(TIME_SLOTS)
PERIOD_MINUTES = 50


def time_slot_label(period: int) -> str:
    """Clock label for a 0-based period index"""
    if not 0 <= period < PERIODS_PER_DAY:
        raise ValueError(f"period must be between 0 and {PERIODS_PER_DAY - 1}, got {period}")
    return TIME_SLOTS[period]


def normalize_day(day: str) -> str:
    """'monday' / 'MON' / 'Monday' -> 'Monday'"""
    cleaned = (day or "").strip().lower()
    for name in DAYS:
        if name.lower() == cleaned or name.lower()[:3] == cleaned:
            return name
    raise ValueError(f"day must be one of {', '.join(DAYS)}, got {day!r}")


def empty_week() -> Dict[str, List[Optional[Any]]]:
    return {day: [None] * PERIODS_PER_DAY for day in DAYS}
