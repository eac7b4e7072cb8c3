"""
Pure helpers for reading capability responses.
Independent of application state, so they are easy to test.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CapabilityError(Exception):
    """Transient failure of an external capability call."""


class CapabilityTimeoutError(CapabilityError):
    pass


class CapabilityResponseError(CapabilityError):
    """Response arrived but is not usable (non-JSON, wrong shape, bad enum)."""


class CapabilityConfigError(RuntimeError):
    """Capability cannot work at all (e.g. missing credentials)."""


@dataclass(slots=True)
class CapabilityResult(Generic[T]):
    """Outcome of one capability-backed operation.

    ``success`` False always carries ``error``; callers branch on it instead
    of catching exceptions.
    """

    success: bool
    value: T | None = None
    error: CapabilityError | None = None

    @classmethod
    def ok(cls, value: T) -> "CapabilityResult[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: CapabilityError) -> "CapabilityResult[T]":
        return cls(success=False, error=error)


def parse_json_payload(payload: Any) -> Any:
    """Parse capability JSON, tolerating fenced blocks and <think> tags.

    Raises ``CapabilityResponseError`` when nothing JSON-like can be read.
    """
    if isinstance(payload, (dict, list)):
        return payload
    if not isinstance(payload, str) or not payload.strip():
        raise CapabilityResponseError("empty capability response")

    cleaned = payload.strip()
    fenced = re.search(r"```(?:json)?\s*(.*?)\s*```", cleaned, flags=re.IGNORECASE | re.DOTALL)
    if fenced:
        cleaned = fenced.group(1).strip()

    if "</think>" in cleaned:
        cleaned = cleaned.split("</think>", 1)[1].strip()

    cleaned = _trim_to_json(cleaned)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.debug("Capability response is not JSON: %.80r", payload)
        raise CapabilityResponseError(f"invalid JSON: {exc}") from exc


def _trim_to_json(text: str) -> str:
    starts = [pos for pos in (text.find("{"), text.find("[")) if pos != -1]
    if not starts:
        return text
    first = min(starts)
    closer = "}" if text[first] == "{" else "]"
    last = text.rfind(closer)
    if last > first:
        return text[first : last + 1]
    return text
