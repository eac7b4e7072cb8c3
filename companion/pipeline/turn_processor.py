from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from config import MAX_TEXT_LENGTH, MEMORY_TOP_N
from companion.context.grief_trajectory import GriefTrajectory
from companion.context.memory_context import memories_to_context
from companion.guides.response_guides import compose_guide
from companion.models import ChatMode, EmotionAnalysis, PetMemory, PetProfile
from companion.pipeline.emotion_analyzer import HybridEmotionAnalyzer
from companion.pipeline.fast_classifier import classify_grief_stage
from companion.pipeline.memory_extractor import MemoryExtractor
from companion.quota.daily_usage import DailyUsageLimiter, UsageCheck
from companion.storage.chat_storage import ChatStorage

logger = logging.getLogger(__name__)

# Control characters to strip (keep tab, newline, carriage return)
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_UNSAFE_CHAR_RE = re.compile(r"[';\\<>]")


def sanitize_input(text: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Drop quote, semicolon, backslash, angle brackets and control characters, then cap length."""
    if not isinstance(text, str) or not text:
        return ""
    text = _CONTROL_CHAR_RE.sub("", text)
    text = _UNSAFE_CHAR_RE.sub("", text)
    return text[:max_length].strip()


@dataclass(slots=True)
class TurnContext:
    """Everything the reply generator needs for one user turn."""

    message: str
    mode: ChatMode
    analysis: EmotionAnalysis
    guide: str
    memory_context: str
    proposed_memories: list[PetMemory] = field(default_factory=list)
    usage: UsageCheck | None = None

    @property
    def keyword_only(self) -> bool:
        return self.usage is not None and not self.usage.allowed


class CompanionTurnProcessor:
    def __init__(
        self,
        analyzer: HybridEmotionAnalyzer,
        extractor: MemoryExtractor | None = None,
        storage: ChatStorage | None = None,
        limiter: DailyUsageLimiter | None = None,
        trajectory: GriefTrajectory | None = None,
        memory_top_n: int = MEMORY_TOP_N,
    ) -> None:
        self.analyzer = analyzer
        self.extractor = extractor
        self.storage = storage
        self.limiter = limiter
        self.trajectory = trajectory or GriefTrajectory()
        self.memory_top_n = memory_top_n

    async def prepare_turn(
        self,
        user_id: str,
        pet: PetProfile,
        message: str,
        *,
        is_authenticated: bool = True,
    ) -> TurnContext:
        text = sanitize_input(message)
        mode = pet.mode
        memorial = mode == "memorial"

        # Nothing left after sanitizing: no capability work, no quota used.
        usage = self.limiter.check(user_id, is_authenticated) if self.limiter and text else None

        if not text:
            analysis = await self.analyzer.analyze(text, memorial, allow_refiner=False)
            proposed = None
        elif usage is None or usage.allowed:
            analysis, proposed = await asyncio.gather(
                self.analyzer.analyze(text, memorial),
                self._extract(text, user_id, pet),
            )
        else:
            logger.info("Quota exhausted for %s, keyword-only turn", user_id)
            analysis = await self.analyzer.analyze(text, memorial, allow_refiner=False)
            proposed = None

        memories = await self._top_memories(pet)
        guide = compose_guide(analysis.emotion, mode, analysis.grief_stage if memorial else None)

        stored = await self._persist(user_id, pet, text, analysis, proposed or [])
        if memorial and analysis.grief_stage is not None:
            self._record_grief(user_id, pet, text, analysis)

        return TurnContext(
            message=text,
            mode=mode,
            analysis=analysis,
            guide=guide,
            memory_context=memories_to_context(memories),
            proposed_memories=stored,
            usage=usage,
        )

    async def _extract(self, text: str, user_id: str, pet: PetProfile) -> list[PetMemory] | None:
        if self.extractor is None or not text:
            return None
        return await self.extractor.extract(text, pet.name, user_id=user_id, pet_id=pet.id or "")

    async def _top_memories(self, pet: PetProfile) -> list[PetMemory]:
        if self.storage is None or not pet.id:
            return []
        try:
            return await self.storage.top_memories(pet.id, self.memory_top_n)
        except Exception as exc:
            logger.warning("Loading memories failed for pet %s: %s", pet.id, exc)
            return []

    async def _persist(
        self,
        user_id: str,
        pet: PetProfile,
        text: str,
        analysis: EmotionAnalysis,
        proposed: list[PetMemory],
    ) -> list[PetMemory]:
        if self.storage is None or not pet.id or not text:
            return proposed

        try:
            await self.storage.append_message(
                user_id, pet.id, "user", text, emotion=analysis.emotion, score=analysis.score
            )
        except Exception as exc:
            logger.warning("Saving message failed for %s/%s: %s", user_id, pet.id, exc)

        stored: list[PetMemory] = []
        for memory in proposed:
            try:
                stored.append(await self.storage.append_memory(user_id, pet.id, memory))
            except Exception as exc:
                logger.warning("Saving memory %r failed: %s", memory.title, exc)
                stored.append(memory)
        return stored

    def _record_grief(self, user_id: str, pet: PetProfile, text: str, analysis: EmotionAnalysis) -> None:
        stage = analysis.grief_stage
        fast_stage, fast_confidence = classify_grief_stage(text)
        confidence = fast_confidence if fast_stage == stage else analysis.score
        self.trajectory.record(user_id, pet.id or "", stage, confidence)
