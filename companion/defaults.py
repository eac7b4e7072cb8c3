"""Centralised algorithm defaults for the companion engine.

All tuneable numeric thresholds of the classifiers and extractors are
collected here so the engine can be tuned from a single location.

Modules import the names they need from here.
"""

from __future__ import annotations

# ── Shared ceiling: no reading is ever reported as certain ───────
CONFIDENCE_CAP: float = 0.9

# ── Fast classifiers (companion/pipeline/fast_classifier.py) ─────
EMOTION_HIT_WEIGHT: float = 0.3
GRIEF_HIT_WEIGHT: float = 0.35
GRIEF_ACCEPT_THRESHOLD: float = 0.3   # strictly greater is accepted

# ── Hybrid analyzer (companion/pipeline/emotion_analyzer.py) ─────
FAST_PATH_THRESHOLD: float = 0.6      # >= skips the refiner

# ── Emotion refiner (companion/pipeline/emotion_refiner.py) ──────
REFINER_MAX_TOKENS: int = 200
REFINER_TEMPERATURE: float = 0.3
REFINER_DEFAULT_SCORE: float = 0.5

# ── Memory extractor (companion/pipeline/memory_extractor.py) ────
EXTRACTOR_MAX_TOKENS: int = 400
EXTRACTOR_TEMPERATURE: float = 0.3
MEMORY_IMPORTANCE_MIN: int = 1
MEMORY_IMPORTANCE_MAX: int = 10
MEMORY_IMPORTANCE_DEFAULT: int = 5
MEMORY_TITLE_MAX_LENGTH: int = 20
MAX_MEMORIES_PER_MESSAGE: int = 5

# ── Quota (companion/quota/daily_usage.py) ───────────────────────
USAGE_WARNING_REMAINING: int = 10

# ── Grief trajectory (companion/context/grief_trajectory.py) ─────
GRIEF_TRAJECTORY_MAX_READINGS: int = 200
