"""Structured memory extraction.

There is no keyword shortcut for facts, so every call goes to the
structured-extraction capability. What comes back is validated item by
item: anything without a known type, a title and content is dropped, and
times are normalised to ``HH:MM`` locally even though the instruction
already asks for that format.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any

from companion.defaults import (
    MAX_MEMORIES_PER_MESSAGE,
    MEMORY_IMPORTANCE_DEFAULT,
    MEMORY_IMPORTANCE_MAX,
    MEMORY_IMPORTANCE_MIN,
    MEMORY_TITLE_MAX_LENGTH,
)
from companion.llm.parser import (
    CapabilityError,
    CapabilityResponseError,
    CapabilityResult,
    CapabilityTimeoutError,
    parse_json_payload,
)
from companion.llm.prompts import build_memory_extractor_prompt
from companion.llm_client import CompanionLLMClient
from companion.models import MEMORY_TYPES, SCHEDULE_TYPES, PetMemory, TimeInfo

logger = logging.getLogger(__name__)

# ── Time normalisation ───────────────────────────────────────────

# Used only when no explicit hour is present. First match wins.
VAGUE_TIME_PHRASES: list[tuple[str, str]] = [
    ("아침", "08:00"),
    ("morning", "08:00"),
    ("점심", "12:00"),
    ("noon", "12:00"),
    ("lunch", "12:00"),
    ("저녁", "18:00"),
    ("evening", "18:00"),
    ("밤", "21:00"),
    ("night", "21:00"),
]

_PM_MARKERS = ("오후", "저녁", "점심", "pm", "p.m.")
_AM_MARKERS = ("오전", "아침", "새벽", "am", "a.m.")

_CLOCK_RE = re.compile(r"(\d{1,2})\s*:\s*(\d{2})")
_KOREAN_HOUR_RE = re.compile(r"(\d{1,2})\s*시(?:\s*(반|(\d{1,2})\s*분))?")
_ENGLISH_HOUR_RE = re.compile(r"(\d{1,2})\s*(a\.?m\.?|p\.?m\.?)")


def normalize_clock(value: Any) -> str | None:
    """Turn a time expression into ``HH:MM`` (24h), or ``None`` if unreadable.

    Accepts "8:00", "19:30", "8시", "8시 반", "오후 7시", "7pm", a bare hour
    as int, and the vague phrases of ``VAGUE_TIME_PHRASES``. An explicit
    hour always wins over a vague phrase in the same string.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return _format(value, 0)
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    if not text:
        return None

    hour: int | None = None
    minute = 0

    match = _CLOCK_RE.search(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
    else:
        match = _KOREAN_HOUR_RE.search(text)
        if match:
            hour = int(match.group(1))
            if match.group(2) == "반":
                minute = 30
            elif match.group(3):
                minute = int(match.group(3))
        else:
            match = _ENGLISH_HOUR_RE.search(text)
            if match:
                hour = int(match.group(1))

    if hour is None:
        for phrase, clock in VAGUE_TIME_PHRASES:
            if phrase in text:
                return clock
        return None

    return _format(_disambiguate(hour, text), minute)


def _disambiguate(hour: int, text: str) -> int:
    if hour > 12:
        return hour
    if any(marker in text for marker in _PM_MARKERS):
        return hour if hour == 12 else hour + 12
    if "밤" in text or "night" in text:
        if 6 <= hour < 12:
            return hour + 12
        return 0 if hour == 12 else hour
    if any(marker in text for marker in _AM_MARKERS) and hour == 12:
        return 0
    return hour


def _format(hour: int, minute: int) -> str | None:
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return f"{hour:02d}:{minute:02d}"


# ── Item validation ──────────────────────────────────────────────


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value == value:
        return int(round(value))
    if isinstance(value, str):
        try:
            return int(round(float(value.strip())))
        except ValueError:
            return None
    return None


def _clamp_importance(value: Any) -> int:
    importance = _as_int(value)
    if importance is None:
        return MEMORY_IMPORTANCE_DEFAULT
    return max(MEMORY_IMPORTANCE_MIN, min(importance, MEMORY_IMPORTANCE_MAX))


def parse_time_info(raw: Any) -> TimeInfo | None:
    if not isinstance(raw, dict):
        return None
    schedule_type = str(raw.get("type") or "").strip().lower()
    if schedule_type not in SCHEDULE_TYPES:
        return None

    day_of_week = _as_int(raw.get("dayOfWeek"))
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        day_of_week = None
    day_of_month = _as_int(raw.get("dayOfMonth"))
    if day_of_month is not None and not 1 <= day_of_month <= 31:
        day_of_month = None

    return TimeInfo(
        type=schedule_type,  # type: ignore[arg-type]
        time=normalize_clock(raw.get("time")),
        day_of_week=day_of_week,
        day_of_month=day_of_month,
    )


def validate_memory_item(item: Any, *, user_id: str = "", pet_id: str = "") -> PetMemory | None:
    """Build a ``PetMemory`` from one extracted object, or ``None`` to drop it."""
    if not isinstance(item, dict):
        return None
    memory_type = str(item.get("memoryType") or item.get("memory_type") or "").strip().lower()
    if memory_type not in MEMORY_TYPES:
        return None

    title = item.get("title")
    content = item.get("content")
    if not isinstance(title, str) or not isinstance(content, str):
        return None
    title, content = title.strip(), content.strip()
    if not title or not content:
        return None

    return PetMemory(
        pet_id=pet_id,
        user_id=user_id,
        memory_type=memory_type,  # type: ignore[arg-type]
        title=title[:MEMORY_TITLE_MAX_LENGTH],
        content=content,
        importance=_clamp_importance(item.get("importance")),
        time_info=parse_time_info(item.get("timeInfo") or item.get("time_info")),
    )


def parse_memory_payload(raw: Any, *, user_id: str = "", pet_id: str = "") -> list[PetMemory]:
    """Validate an extraction response. Raises ``CapabilityResponseError`` if not an array."""
    data = parse_json_payload(raw)
    if not isinstance(data, list):
        raise CapabilityResponseError("extraction response is not an array")

    memories: list[PetMemory] = []
    for item in data:
        memory = validate_memory_item(item, user_id=user_id, pet_id=pet_id)
        if memory is None:
            logger.debug("Dropped extracted item: %.120r", item)
            continue
        memories.append(memory)
        if len(memories) >= MAX_MEMORIES_PER_MESSAGE:
            break
    return memories


# ── Extractor ────────────────────────────────────────────────────


class MemoryExtractor:
    def __init__(self, llm_client: CompanionLLMClient, *, timeout: float | None = None) -> None:
        self.llm_client = llm_client
        self.timeout = timeout

    async def extract(
        self,
        message: str,
        pet_name: str,
        *,
        user_id: str = "",
        pet_id: str = "",
    ) -> list[PetMemory] | None:
        """Memories worth keeping, or ``None`` when there is nothing to persist."""
        result = await self.run(message, pet_name, user_id=user_id, pet_id=pet_id)
        if not result.success or not result.value:
            return None
        return result.value

    async def run(
        self,
        message: str,
        pet_name: str,
        *,
        user_id: str = "",
        pet_id: str = "",
    ) -> CapabilityResult[list[PetMemory]]:
        prompt = build_memory_extractor_prompt(pet_name)
        try:
            raw = await asyncio.wait_for(
                self.llm_client.extract_memories(prompt, message),
                timeout=self.timeout,
            )
            memories = parse_memory_payload(raw, user_id=user_id, pet_id=pet_id)
        except asyncio.TimeoutError:
            return self._fail(CapabilityTimeoutError(f"no answer within {self.timeout}s"))
        except CapabilityError as exc:
            return self._fail(exc)
        except Exception as exc:
            return self._fail(CapabilityError(f"{type(exc).__name__}: {exc}"))

        if memories:
            logger.info("Extracted %d memories for %s", len(memories), pet_name or "pet")
        return CapabilityResult.ok(memories)

    @staticmethod
    def _fail(error: CapabilityError) -> CapabilityResult[list[PetMemory]]:
        logger.warning("Memory extraction failed: %s", error)
        return CapabilityResult.fail(error)
