from __future__ import annotations

from ..core.enums import ScanState

_END = frozenset({ScanState.FAILED, ScanState.CANCELLED})

TRANSITIONS: dict[ScanState, frozenset[ScanState]] = {
    # IDLE -> RESOLVING / SUBMITTING: identifier supplied without a read.
    ScanState.IDLE: frozenset({ScanState.READING, ScanState.RESOLVING, ScanState.SUBMITTING}) | _END,
    ScanState.READING: frozenset({ScanState.DECODING}) | _END,
    ScanState.DECODING: frozenset({ScanState.RESOLVING, ScanState.SUBMITTING}) | _END,
    ScanState.RESOLVING: frozenset({ScanState.SUBMITTING}) | _END,
    ScanState.SUBMITTING: frozenset({ScanState.COMPLETED}) | _END,
    ScanState.COMPLETED: frozenset(),
    ScanState.FAILED: frozenset(),
    ScanState.CANCELLED: frozenset(),
}


def can_transition(current: ScanState, target: ScanState) -> bool:
    return target in TRANSITIONS[current]


def transition(current: ScanState, target: ScanState) -> ScanState:
    if not can_transition(current, target):
        raise RuntimeError(f"Illegal scan transition {current.value} -> {target.value}")
    return target
