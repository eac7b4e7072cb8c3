"""Keyword fast path: deterministic, zero-network classification.

Both classifiers share one scorer: normalize the message (lower-case, all
whitespace removed), count how many keywords of each label occur as
substrings, and keep the label with the strictly highest count, so ties go
to the label declared first in the table.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any, TypeVar

from companion.defaults import CONFIDENCE_CAP, EMOTION_HIT_WEIGHT, GRIEF_HIT_WEIGHT
from companion.models import Emotion, GriefStage
from companion.pipeline.emotion_keywords import EMOTION_KEYWORDS, GRIEF_KEYWORDS

logger = logging.getLogger(__name__)

L = TypeVar("L", bound=str)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize(message: Any) -> str:
    """Lower-case and strip all whitespace. Non-text input becomes ``""``."""
    if not isinstance(message, str):
        return ""
    return _WHITESPACE_RE.sub("", message.lower())


def count_matches(normalized: str, keywords: Sequence[str]) -> int:
    return sum(1 for keyword in keywords if keyword and keyword in normalized)


def _best_label(
    normalized: str,
    table: Sequence[tuple[L, Sequence[str]]],
) -> tuple[L | None, int]:
    best_label: L | None = None
    best_count = 0
    for label, keywords in table:
        count = count_matches(normalized, keywords)
        if count > best_count:
            best_label = label
            best_count = count
    return best_label, best_count


def classify_emotion(message: Any) -> tuple[Emotion, float]:
    """Return ``(emotion, confidence)``; ``("neutral", 0.0)`` when nothing matches."""
    label, count = _best_label(normalize(message), EMOTION_KEYWORDS)
    if label is None:
        return "neutral", 0.0
    confidence = min(count * EMOTION_HIT_WEIGHT, CONFIDENCE_CAP)
    logger.debug("Fast emotion: %s hits=%d confidence=%.2f", label, count, confidence)
    return label, confidence


def classify_grief_stage(message: Any) -> tuple[GriefStage, float]:
    """Return ``(stage, confidence)``; ``("unknown", 0.0)`` when nothing matches."""
    label, count = _best_label(normalize(message), GRIEF_KEYWORDS)
    if label is None:
        return "unknown", 0.0
    confidence = min(count * GRIEF_HIT_WEIGHT, CONFIDENCE_CAP)
    logger.debug("Fast grief stage: %s hits=%d confidence=%.2f", label, count, confidence)
    return label, confidence
