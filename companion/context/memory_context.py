from __future__ import annotations

from collections.abc import Iterable

from companion.models import PetMemory, TimeInfo

SCHEDULE_LABELS = {
    "daily": "매일",
    "weekly": "매주",
    "monthly": "매월",
    "once": "한 번",
}

WEEKDAY_LABELS = ("일", "월", "화", "수", "목", "금", "토")


def _schedule_suffix(time_info: TimeInfo | None) -> str:
    if time_info is None or not time_info.time:
        return ""
    label = SCHEDULE_LABELS.get(time_info.type, "")
    if time_info.type == "weekly" and time_info.day_of_week in range(7):
        label = f"{label} {WEEKDAY_LABELS[time_info.day_of_week]}요일"
    elif time_info.type == "monthly" and time_info.day_of_month is not None:
        label = f"{label} {time_info.day_of_month}일"
    return f" ({label} {time_info.time})"


def _one_line(text: str) -> str:
    return " ".join(text.split())


def memory_line(memory: PetMemory) -> str:
    return (
        f"- [{memory.memory_type}] {_one_line(memory.title)}: {_one_line(memory.content)}"
        f"{_schedule_suffix(memory.time_info)}"
    )


def memories_to_context(memories: Iterable[PetMemory]) -> str:
    """One line per memory, in the given order. No memories, empty string."""
    return "\n".join(memory_line(memory) for memory in memories)
