"""Oracle collaborator - betting window and approved outcome per event.

The approval/dispute workflow lives outside this package; markets only ask
whether betting is open and which option won.
"""

from __future__ import annotations

from threading import Lock
from typing import Protocol


class Oracle(Protocol):
    """Minimal oracle view consumed by pricing and settlement."""

    def get_betting_window(self, event_id: str) -> tuple[int, int]: ...

    def get_approval_and_winner(self, event_id: str) -> tuple[bool, int | None]: ...


class StaticOracle:
    """In-process oracle with values set directly. Used in tests and tooling."""

    def __init__(self) -> None:
        self._windows: dict[str, tuple[int, int]] = {}
        self._outcomes: dict[str, tuple[bool, int | None]] = {}
        self._lock = Lock()

    def set_window(self, event_id: str, start: int, end: int) -> None:
        if end < start:
            raise ValueError(f"window end {end} before start {start}")
        with self._lock:
            self._windows[event_id] = (start, end)

    def set_outcome(self, event_id: str, approved: bool, winning_option_index: int | None) -> None:
        with self._lock:
            self._outcomes[event_id] = (approved, winning_option_index)

    def get_betting_window(self, event_id: str) -> tuple[int, int]:
        with self._lock:
            # Unknown events have an empty window
            return self._windows.get(event_id, (0, -1))

    def get_approval_and_winner(self, event_id: str) -> tuple[bool, int | None]:
        with self._lock:
            return self._outcomes.get(event_id, (False, None))


def window_is_open(oracle: Oracle, event_id: str, now: int) -> bool:
    start, end = oracle.get_betting_window(event_id)
    return start <= now <= end
