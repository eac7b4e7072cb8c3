from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal


Emotion = Literal[
    "happy",
    "sad",
    "anxious",
    "angry",
    "grateful",
    "lonely",
    "peaceful",
    "excited",
    "neutral",
]

GriefStage = Literal[
    "denial",
    "anger",
    "bargaining",
    "depression",
    "acceptance",
    "unknown",
]

MemoryType = Literal[
    "preference",
    "episode",
    "health",
    "personality",
    "relationship",
    "place",
    "routine",
    "schedule",
]

ScheduleType = Literal["daily", "weekly", "monthly", "once"]

ChatMode = Literal["daily", "memorial"]

AnalysisSource = Literal["keyword", "model", "fallback"]

# Declaration order is significant: the fast classifiers break ties by it.
EMOTIONS: tuple[Emotion, ...] = (
    "happy",
    "sad",
    "anxious",
    "angry",
    "grateful",
    "lonely",
    "peaceful",
    "excited",
    "neutral",
)

GRIEF_STAGES: tuple[GriefStage, ...] = (
    "denial",
    "anger",
    "bargaining",
    "depression",
    "acceptance",
    "unknown",
)

MEMORY_TYPES: tuple[MemoryType, ...] = (
    "preference",
    "episode",
    "health",
    "personality",
    "relationship",
    "place",
    "routine",
    "schedule",
)

SCHEDULE_TYPES: tuple[ScheduleType, ...] = ("daily", "weekly", "monthly", "once")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class EmotionAnalysis:
    """Per-message emotion reading. Never persisted by the engine itself."""

    emotion: Emotion
    score: float
    context: str
    grief_stage: GriefStage | None = None
    source: AnalysisSource = "keyword"
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "emotion": self.emotion,
            "score": round(self.score, 3),
            "context": self.context,
            "source": self.source,
        }
        if self.grief_stage is not None:
            data["griefStage"] = self.grief_stage
        if self.degraded:
            data["degraded"] = True
        return data


@dataclass(slots=True)
class TimeInfo:
    type: ScheduleType
    time: str | None = None
    day_of_week: int | None = None
    day_of_month: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.time is not None:
            data["time"] = self.time
        if self.day_of_week is not None:
            data["dayOfWeek"] = self.day_of_week
        if self.day_of_month is not None:
            data["dayOfMonth"] = self.day_of_month
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeInfo":
        return cls(
            type=data["type"],
            time=data.get("time"),
            day_of_week=data.get("dayOfWeek"),
            day_of_month=data.get("dayOfMonth"),
        )


@dataclass(slots=True)
class PetMemory:
    pet_id: str
    user_id: str
    memory_type: MemoryType
    title: str
    content: str
    importance: int
    time_info: TimeInfo | None = None
    id: str | None = None
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "petId": self.pet_id,
            "userId": self.user_id,
            "memoryType": self.memory_type,
            "title": self.title,
            "content": self.content,
            "importance": self.importance,
            "timeInfo": self.time_info.to_dict() if self.time_info else None,
        }


@dataclass(slots=True)
class PetProfile:
    """Minimal pet profile the engine needs to pick a mode and name the pet."""

    id: str | None
    name: str
    status: Literal["active", "memorial"] = "active"

    @property
    def mode(self) -> ChatMode:
        return "memorial" if self.status == "memorial" else "daily"
