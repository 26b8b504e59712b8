"""Single source of truth for the capture flow.

``CaptureState`` is immutable; every transition swaps in a new record through
``StateStore`` and only ``CaptureOrchestrator`` writes to the store.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable

from .models import AnalysisResult

Listener = Callable[["CaptureState"], None]


class Phase(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    PREVIEWING = "previewing"
    ANALYZING = "analyzing"


@dataclass(frozen=True, slots=True)
class CaptureState:
    phase: Phase = Phase.IDLE
    image_data: str | None = None
    analysis: AnalysisResult | None = None
    # Overlay: may accompany IDLE or PREVIEWING.
    error: str | None = None

    @property
    def is_capturing(self) -> bool:
        return self.phase is Phase.CAPTURING

    @property
    def is_previewing(self) -> bool:
        return self.phase is Phase.PREVIEWING

    @property
    def is_analyzing(self) -> bool:
        return self.phase is Phase.ANALYZING

    @property
    def is_idle(self) -> bool:
        return self.phase is Phase.IDLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "isCapturing": self.is_capturing,
            "isPreviewing": self.is_previewing,
            "isAnalyzing": self.is_analyzing,
            "hasImage": self.image_data is not None,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "error": self.error,
        }


class StateStore:
    def __init__(self, initial: CaptureState | None = None) -> None:
        self._state = initial or CaptureState()
        self._listeners: list[Listener] = []

    def get(self) -> CaptureState:
        return self._state

    def set(self, state: CaptureState) -> CaptureState:
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state

    def update(self, **changes: Any) -> CaptureState:
        return self.set(replace(self._state, **changes))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
