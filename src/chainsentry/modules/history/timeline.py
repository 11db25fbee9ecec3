"""Attack timeline construction and bounded attack history."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from chainsentry.modules.chain.models import AttackVector, TransactionAnalysis

from .models import AttackEvent

CRITICAL_VECTOR_TYPES = frozenset({"Integer Overflow/Underflow", "Access Control Violation"})


def determine_severity(vector: AttackVector) -> str:
    """Severity of one detected vector from its type and confidence."""
    if vector.confidence == "high" and vector.type in CRITICAL_VECTOR_TYPES:
        return "critical"
    if vector.confidence == "high":
        return "high"
    if vector.confidence == "medium":
        return "medium"
    return "low"


def build_attack_timeline(analyses: Iterable[TransactionAnalysis]) -> list[AttackEvent]:
    """One event per (transaction, vector), ordered by timestamp."""
    timeline = [
        AttackEvent(
            timestamp=analysis.timestamp,
            type=vector.type,
            severity=determine_severity(vector),
            program=analysis.program,
            signature=analysis.signature,
            description="; ".join(vector.evidence),
        )
        for analysis in analyses
        for vector in analysis.attack_vectors
    ]
    timeline.sort(key=lambda event: event.timestamp)
    return timeline


class AttackHistory:
    """Process-lifetime log of attack events, evicting the oldest past ``limit``."""

    def __init__(self, limit: int | None = 10_000):
        self.limit = limit
        self._events: deque[AttackEvent] = deque(maxlen=limit)

    def extend(self, events: Iterable[AttackEvent]) -> None:
        self._events.extend(events)

    @property
    def events(self) -> list[AttackEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)
