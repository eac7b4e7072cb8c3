from __future__ import annotations

import logging

from config import (
    CAPABILITY_TIMEOUT,
    DAILY_LIMIT,
    DAILY_LIMIT_AUTH,
    DB_PATH as _DEFAULT_DB_PATH,
    MEMORY_TOP_N,
    USE_LLM,
)
from companion.context.grief_trajectory import GriefTrajectory
from companion.llm_client import CompanionLLMClient, OpenAICompanionClient
from companion.pipeline.emotion_analyzer import HybridEmotionAnalyzer
from companion.pipeline.emotion_refiner import EmotionRefiner
from companion.pipeline.memory_extractor import MemoryExtractor
from companion.pipeline.turn_processor import CompanionTurnProcessor
from companion.quota.daily_usage import DailyUsageLimiter
from companion.storage.chat_storage import ChatStorage

logger = logging.getLogger(__name__)


def build_processor(
    db_path: str | None = None,
    *,
    llm_client: CompanionLLMClient | None = None,
    use_llm: bool | None = None,
) -> CompanionTurnProcessor:
    """Wire a turn processor from ``config``.

    The capability client is built once here and shared by the refiner and
    the extractor. A missing API key raises ``CapabilityConfigError`` now,
    not on the first message. With ``use_llm`` off the processor runs
    keyword-only and extracts nothing.
    """
    enabled = USE_LLM if use_llm is None else use_llm

    refiner: EmotionRefiner | None = None
    extractor: MemoryExtractor | None = None
    if enabled:
        client = llm_client or OpenAICompanionClient()
        refiner = EmotionRefiner(client, timeout=CAPABILITY_TIMEOUT)
        extractor = MemoryExtractor(client, timeout=CAPABILITY_TIMEOUT)
    else:
        logger.info("Capabilities disabled, running keyword-only")

    return CompanionTurnProcessor(
        analyzer=HybridEmotionAnalyzer(refiner),
        extractor=extractor,
        storage=ChatStorage(db_path=db_path or _DEFAULT_DB_PATH),
        limiter=DailyUsageLimiter(DAILY_LIMIT, DAILY_LIMIT_AUTH),
        trajectory=GriefTrajectory(),
        memory_top_n=MEMORY_TOP_N,
    )
