import asyncio
import json

import pytest

from companion.guides.response_guides import DAILY_GUIDES, GRIEF_GUIDE_HEADING
from companion.llm.parser import CapabilityError
from companion.models import PetProfile
from companion.pipeline.emotion_analyzer import HybridEmotionAnalyzer
from companion.pipeline.emotion_refiner import EmotionRefiner
from companion.pipeline.memory_extractor import MemoryExtractor
from companion.pipeline.turn_processor import CompanionTurnProcessor, sanitize_input
from companion.quota.daily_usage import DailyUsageLimiter
from companion.storage.chat_storage import ChatStorage

WALK_MEMORY = [
    {
        "memoryType": "schedule",
        "title": "아침 산책",
        "content": "매일 아침 8시에 산책",
        "importance": 8,
        "timeInfo": {"type": "daily", "time": "08:00"},
    }
]


class CompanionClient:
    def __init__(self, emotion_reply: str = "", memory_reply: str = "[]", error: Exception | None = None) -> None:
        self.emotion_reply = emotion_reply
        self.memory_reply = memory_reply
        self.error = error
        self.classify_calls = 0
        self.extract_calls = 0

    async def classify_emotion(self, system_prompt: str, message: str) -> str:
        self.classify_calls += 1
        if self.error is not None:
            raise self.error
        return self.emotion_reply

    async def extract_memories(self, system_prompt: str, message: str) -> str:
        self.extract_calls += 1
        if self.error is not None:
            raise self.error
        return self.memory_reply


class BrokenStorage:
    async def append_message(self, *args, **kwargs):
        raise RuntimeError("disk full")

    async def append_memory(self, *args, **kwargs):
        raise RuntimeError("disk full")

    async def top_memories(self, *args, **kwargs):
        raise RuntimeError("disk full")


def _processor(client: CompanionClient, storage=None, limiter=None) -> CompanionTurnProcessor:
    return CompanionTurnProcessor(
        analyzer=HybridEmotionAnalyzer(EmotionRefiner(client, timeout=1.0)),
        extractor=MemoryExtractor(client, timeout=1.0),
        storage=storage,
        limiter=limiter,
    )


def test_daily_turn_extracts_and_remembers(tmp_path):
    async def scenario() -> None:
        client = CompanionClient(
            '{"emotion": "happy", "score": 0.6, "context": "산책 이야기"}',
            json.dumps(WALK_MEMORY, ensure_ascii=False),
        )
        storage = ChatStorage(db_path=tmp_path / "test.db")
        processor = _processor(client, storage)
        pet = PetProfile(id="p1", name="초코")

        turn = await processor.prepare_turn("u1", pet, "매일 아침 8시에 산책 가요")
        assert turn.mode == "daily"
        assert turn.analysis.emotion == "happy"
        assert turn.guide == DAILY_GUIDES["happy"]
        assert turn.memory_context == ""
        assert len(turn.proposed_memories) == 1
        assert turn.proposed_memories[0].id is not None

        client.memory_reply = "[]"
        second = await processor.prepare_turn("u1", pet, "오늘 날씨 좋다")
        assert second.memory_context == "- [schedule] 아침 산책: 매일 아침 8시에 산책 (매일 08:00)"
        assert second.proposed_memories == []

        messages = await storage.recent_messages("u1", "p1")
        assert [m.content for m in messages] == ["매일 아침 8시에 산책 가요", "오늘 날씨 좋다"]
        assert messages[0].emotion == "happy"

    asyncio.run(scenario())


def test_memorial_turn_appends_grief_guide_and_records_trajectory():
    async def scenario() -> None:
        client = CompanionClient('{"emotion": "sad", "score": 0.5, "context": "상실"}')
        processor = _processor(client)
        pet = PetProfile(id="p1", name="초코", status="memorial")

        turn = await processor.prepare_turn("u1", pet, "아직도 믿기지 않아")
        assert turn.mode == "memorial"
        assert turn.analysis.grief_stage == "denial"
        assert GRIEF_GUIDE_HEADING in turn.guide

        latest = processor.trajectory.latest("u1", "p1")
        assert latest is not None
        assert latest.stage == "denial"
        assert latest.confidence == pytest.approx(0.35)

    asyncio.run(scenario())


def test_exhausted_quota_runs_keyword_only():
    async def scenario() -> None:
        client = CompanionClient('{"emotion": "peaceful", "score": 0.5, "context": "x"}')
        limiter = DailyUsageLimiter(daily_limit=1, daily_limit_auth=1, today=lambda: "2026-03-01")
        processor = _processor(client, limiter=limiter)
        pet = PetProfile(id="p1", name="초코")

        first = await processor.prepare_turn("u1", pet, "안녕")
        assert first.analysis.source == "model"
        assert (client.classify_calls, client.extract_calls) == (1, 1)

        second = await processor.prepare_turn("u1", pet, "안녕")
        assert (client.classify_calls, client.extract_calls) == (1, 1)
        assert second.keyword_only is True
        assert second.usage.allowed is False
        assert second.analysis.emotion == "neutral"
        assert second.analysis.source == "keyword"
        assert second.proposed_memories == []

    asyncio.run(scenario())


def test_capability_outage_still_yields_a_turn():
    async def scenario() -> None:
        client = CompanionClient(error=CapabilityError("provider down"))
        processor = _processor(client)
        turn = await processor.prepare_turn("u1", PetProfile(id="p1", name="초코"), "행복해")

        assert turn.analysis.emotion == "happy"
        assert turn.analysis.degraded is True
        assert turn.proposed_memories == []
        assert turn.guide == DAILY_GUIDES["happy"]

    asyncio.run(scenario())


def test_storage_failure_does_not_fail_the_turn():
    async def scenario() -> None:
        client = CompanionClient(
            '{"emotion": "happy", "score": 0.6, "context": "x"}',
            json.dumps(WALK_MEMORY, ensure_ascii=False),
        )
        processor = _processor(client, storage=BrokenStorage())
        turn = await processor.prepare_turn("u1", PetProfile(id="p1", name="초코"), "매일 아침 8시에 산책 가요")

        assert turn.memory_context == ""
        assert len(turn.proposed_memories) == 1
        assert turn.proposed_memories[0].id is None

    asyncio.run(scenario())


def test_message_is_sanitized_before_analysis():
    async def scenario() -> None:
        client = CompanionClient('{"emotion": "neutral", "score": 0.1, "context": "x"}')
        turn = await _processor(client).prepare_turn("u1", PetProfile(id=None, name="초코"), "  <b>안녕</b>; ")
        assert turn.message == "b안녕/b"

    asyncio.run(scenario())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("<script>alert('x');</script>", "scriptalert(x)/script"),
        ("  보고 싶어\x00\x07  ", "보고 싶어"),
        ("C:\\path", "C:path"),
        (None, ""),
        ("", ""),
    ],
)
def test_sanitize_input(raw, expected):
    assert sanitize_input(raw) == expected


def test_sanitize_input_caps_length():
    assert len(sanitize_input("가" * 1500, max_length=1000)) == 1000


def test_empty_message_uses_no_quota_or_capability():
    async def scenario() -> None:
        client = CompanionClient('{"emotion": "peaceful", "score": 0.5, "context": "x"}')
        limiter = DailyUsageLimiter(daily_limit=1, daily_limit_auth=1, today=lambda: "2026-03-01")
        processor = _processor(client, limiter=limiter)
        pet = PetProfile(id="p1", name="초코")

        empty = await processor.prepare_turn("u1", pet, "<>;' ")
        assert empty.message == ""
        assert empty.usage is None
        assert empty.analysis.emotion == "neutral"
        assert (client.classify_calls, client.extract_calls) == (0, 0)

        real = await processor.prepare_turn("u1", pet, "안녕")
        assert real.usage.allowed is True
        assert (client.classify_calls, client.extract_calls) == (1, 1)

    asyncio.run(scenario())
