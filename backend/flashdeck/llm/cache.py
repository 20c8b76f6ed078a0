"""Age-based cache for the provider model catalog."""

from __future__ import annotations

from dataclasses import dataclass

from flashdeck.llm.types import ModelInfo


@dataclass(frozen=True, slots=True)
class ModelListCache:
    value: tuple[ModelInfo, ...]
    fetched_at: float

    def is_stale(self, now: float, ttl_seconds: float) -> bool:
        return now - self.fetched_at >= ttl_seconds
