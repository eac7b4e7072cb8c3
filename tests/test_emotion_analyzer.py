"""Hybrid analyzer and model refiner, driven by a scripted capability client."""

import asyncio

import pytest

from companion.llm.parser import CapabilityError, CapabilityResponseError, CapabilityTimeoutError
from companion.pipeline.emotion_analyzer import HybridEmotionAnalyzer, accepted_grief_stage
from companion.pipeline.emotion_refiner import EmotionRefiner, parse_emotion_payload


class ScriptedClient:
    """Answers classification requests with a fixed reply, error or delay."""

    def __init__(self, reply: str = "", error: Exception | None = None, delay: float = 0.0) -> None:
        self.reply = reply
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def classify_emotion(self, system_prompt: str, message: str) -> str:
        self.prompts.append(system_prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply

    async def extract_memories(self, system_prompt: str, message: str) -> str:
        return "[]"


def _analyzer(client: ScriptedClient, timeout: float | None = None) -> HybridEmotionAnalyzer:
    return HybridEmotionAnalyzer(EmotionRefiner(client, timeout=timeout))


# ── fast path gate ─────────────────────────────────────────────


def test_decisive_keywords_skip_refiner():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "grateful", "score": 0.9, "context": "x"}')
        result = await _analyzer(client).analyze("너무 보고싶어 그리워")

        assert client.calls == 0
        assert result.emotion == "sad"
        assert result.score == pytest.approx(0.6)
        assert result.context == "keyword-based"
        assert result.source == "keyword"
        assert result.degraded is False

    asyncio.run(scenario())


def test_no_keyword_goes_to_refiner():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "peaceful", "score": 0.7, "context": "가벼운 인사"}')
        result = await _analyzer(client).analyze("안녕")

        assert client.calls == 1
        assert result.emotion == "peaceful"
        assert result.score == pytest.approx(0.7)
        assert result.context == "가벼운 인사"
        assert result.source == "model"

    asyncio.run(scenario())


@pytest.mark.parametrize(
    ("message", "expected_calls"),
    [
        ("행복해", 1),          # one hit, 0.3
        ("행복하고 기뻐", 0),   # two hits, 0.6
        ("안녕", 1),            # no hit
    ],
)
def test_refiner_called_only_below_threshold(message, expected_calls):
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "happy", "score": 0.8, "context": "x"}')
        await _analyzer(client).analyze(message)
        assert client.calls == expected_calls

    asyncio.run(scenario())


def test_keyword_only_without_refiner():
    async def scenario() -> None:
        result = await HybridEmotionAnalyzer().analyze("행복해")
        assert result.emotion == "happy"
        assert result.context == "keyword-only"
        assert result.degraded is False

    asyncio.run(scenario())


def test_allow_refiner_false_skips_call():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5, "context": "x"}')
        result = await _analyzer(client).analyze("안녕", allow_refiner=False)
        assert client.calls == 0
        assert result.emotion == "neutral"
        assert result.source == "keyword"

    asyncio.run(scenario())


# ── degraded fallback ──────────────────────────────────────────


@pytest.mark.parametrize(
    "client",
    [
        ScriptedClient(error=CapabilityError("network down")),
        ScriptedClient(error=RuntimeError("unexpected")),
        ScriptedClient("I think the user feels sad"),
        ScriptedClient('{"emotion": "melancholy", "score": 0.4}'),
        ScriptedClient('["sad"]'),
        ScriptedClient(""),
    ],
    ids=["capability-error", "runtime-error", "not-json", "unknown-enum", "not-object", "empty"],
)
def test_refiner_failure_degrades_to_keywords(client):
    async def scenario() -> None:
        result = await _analyzer(client).analyze("행복해")
        assert client.calls == 1
        assert result.emotion == "happy"
        assert result.score == pytest.approx(0.3)
        assert result.source == "fallback"
        assert result.context == "keyword-fallback"
        assert result.degraded is True

    asyncio.run(scenario())


def test_refiner_timeout_degrades():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5}', delay=0.5)
        result = await _analyzer(client, timeout=0.01).analyze("안녕")
        assert result.degraded is True
        assert result.emotion == "neutral"

    asyncio.run(scenario())


def test_refine_returns_failed_result_instead_of_raising():
    async def scenario() -> None:
        refiner = EmotionRefiner(ScriptedClient(delay=0.5), timeout=0.01)
        result = await refiner.refine("안녕")
        assert result.success is False
        assert isinstance(result.error, CapabilityTimeoutError)

    asyncio.run(scenario())


# ── grief stage merge ──────────────────────────────────────────


def test_memorial_attaches_single_denial_hit():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5, "context": "상실"}')
        result = await _analyzer(client).analyze("아직도 믿기지 않아", memorial_mode=True)
        assert result.emotion == "sad"
        assert result.grief_stage == "denial"

    asyncio.run(scenario())


def test_refiner_grief_stage_wins_over_keywords():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5, "context": "x", "griefStage": "bargaining"}')
        result = await _analyzer(client).analyze("아직도 믿기지 않아", memorial_mode=True)
        assert result.grief_stage == "bargaining"

    asyncio.run(scenario())


def test_refiner_unknown_stage_keeps_keyword_stage():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5, "context": "x", "griefStage": "unknown"}')
        result = await _analyzer(client).analyze("아직도 믿기지 않아", memorial_mode=True)
        assert result.grief_stage == "denial"

    asyncio.run(scenario())


def test_daily_mode_never_carries_grief_stage():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5, "context": "x", "griefStage": "denial"}')
        result = await _analyzer(client).analyze("아직도 믿기지 않아")
        assert result.grief_stage is None
        assert "griefStage" not in result.to_dict()

    asyncio.run(scenario())


def test_degraded_memorial_keeps_accepted_stage():
    async def scenario() -> None:
        client = ScriptedClient(error=CapabilityError("down"))
        result = await _analyzer(client).analyze("아직도 믿기지 않아", memorial_mode=True)
        assert result.degraded is True
        assert result.grief_stage == "denial"

    asyncio.run(scenario())


def test_accepted_grief_stage_threshold():
    assert accepted_grief_stage("아직도 믿기지 않아") == ("denial", pytest.approx(0.35))
    assert accepted_grief_stage("안녕") == (None, 0.0)


# ── refiner prompt and payload ─────────────────────────────────


def test_prompt_requests_grief_stage_only_in_memorial_mode():
    async def scenario() -> None:
        client = ScriptedClient('{"emotion": "sad", "score": 0.5, "context": "x"}')
        refiner = EmotionRefiner(client)
        await refiner.refine("안녕", memorial_mode=False)
        await refiner.refine("안녕", memorial_mode=True)

        daily_prompt, memorial_prompt = client.prompts
        assert "griefStage" not in daily_prompt
        assert "griefStage" in memorial_prompt
        for prompt in client.prompts:
            assert "보고싶어" in prompt
            assert "lonely" in prompt and "sad" in prompt

    asyncio.run(scenario())


def test_payload_score_is_clamped_and_defaulted():
    assert parse_emotion_payload('{"emotion": "happy", "score": 1.5}', False).score == 0.9
    assert parse_emotion_payload('{"emotion": "happy", "score": -2}', False).score == 0.0
    assert parse_emotion_payload('{"emotion": "happy"}', False).score == 0.5
    assert parse_emotion_payload('{"emotion": "happy", "score": "high"}', False).score == 0.5


def test_payload_missing_emotion_raises():
    with pytest.raises(CapabilityResponseError):
        parse_emotion_payload('{"score": 0.5, "context": "x"}', False)
