"""Transcription engine state — a status tag with an optional error payload."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class EngineStatus(enum.Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    READY = 'ready'
    TRANSCRIBING = 'transcribing'
    FAILED = 'failed'


# Allowed transitions; IDLE is reachable from anywhere through unload().
ALLOWED_TRANSITIONS: dict[EngineStatus, frozenset[EngineStatus]] = {
    EngineStatus.IDLE: frozenset({EngineStatus.LOADING}),
    EngineStatus.LOADING: frozenset({EngineStatus.READY, EngineStatus.FAILED}),
    EngineStatus.READY: frozenset({EngineStatus.TRANSCRIBING}),
    EngineStatus.TRANSCRIBING: frozenset({EngineStatus.READY}),
    EngineStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class EngineState:
    status: EngineStatus
    error: BaseException | None = None

    @classmethod
    def idle(cls) -> EngineState:
        return cls(EngineStatus.IDLE)

    @classmethod
    def failed(cls, error: BaseException) -> EngineState:
        return cls(EngineStatus.FAILED, error)

    def can_transition_to(self, status: EngineStatus) -> bool:
        return status is EngineStatus.IDLE or status in ALLOWED_TRANSITIONS[self.status]

    def __str__(self) -> str:
        if self.error is not None:
            return f'{self.status.value}: {self.error}'
        return self.status.value
