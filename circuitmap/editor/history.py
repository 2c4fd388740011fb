"""Undo/redo history over diagram snapshots.

Each editing session owns its own HistoryManager. Edits are recorded either
as immediate history boundaries or coalesced: a burst of coalesced records
(e.g. drag frames) updates ``present`` on every call but becomes a single
undo step once the burst has been quiet for the coalescing window.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import time
from typing import Callable, Optional, Protocol

from circuitmap.wiring.models import DiagramSnapshot

logger = logging.getLogger(__name__)

MAX_HISTORY_SIZE = 50
COALESCE_WINDOW = 0.3  # seconds


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class TimerHandle:
    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class TimerQueue:
    """Deadline timers fired by polling ``run_due`` from the host's event loop.

    ``clock`` is injectable so tests can advance virtual time.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._clock() + delay, callback)
        heapq.heappush(self._heap, (handle.deadline, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def run_due(self) -> int:
        """Fire every live timer whose deadline has passed. Returns how many fired."""
        now = self._clock()
        fired = 0
        while self._heap and self._heap[0][0] <= now:
            _, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        return fired


class AsyncioScheduler:
    """Schedules on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class HistoryManager:
    """Linear undo/redo stacks around a present snapshot."""

    def __init__(
        self,
        initial: Optional[DiagramSnapshot] = None,
        *,
        max_size: int = MAX_HISTORY_SIZE,
        coalesce_window: float = COALESCE_WINDOW,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._past: list[DiagramSnapshot] = []
        self._present: DiagramSnapshot = initial if initial is not None else DiagramSnapshot()
        self._future: list[DiagramSnapshot] = []
        self._max_size = max_size
        self._coalesce_window = coalesce_window
        self._scheduler: Scheduler = scheduler if scheduler is not None else TimerQueue()
        # State before the current coalesced burst, committed when the timer fires.
        self._pending_base: Optional[DiagramSnapshot] = None
        self._timer: Optional[Cancellable] = None

    # -- State --

    @property
    def present(self) -> DiagramSnapshot:
        return self._present

    @property
    def past(self) -> tuple[DiagramSnapshot, ...]:
        return tuple(self._past)

    @property
    def future(self) -> tuple[DiagramSnapshot, ...]:
        return tuple(self._future)

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def can_undo(self) -> bool:
        return bool(self._past) or self._pending_base is not None

    @property
    def can_redo(self) -> bool:
        return bool(self._future) and self._pending_base is None

    @property
    def has_pending(self) -> bool:
        return self._pending_base is not None

    # -- Recording --

    def _push_past(self, snapshot: DiagramSnapshot) -> None:
        self._past.append(snapshot)
        if len(self._past) > self._max_size:
            del self._past[: len(self._past) - self._max_size]

    def record_immediate(self, snapshot: DiagramSnapshot) -> None:
        """Make ``snapshot`` present as its own undo step; clears redo."""
        self.flush()
        self._push_past(self._present)
        self._present = snapshot
        self._future.clear()

    def record_coalesced(self, snapshot: DiagramSnapshot, window: Optional[float] = None) -> None:
        """Make ``snapshot`` present now; the undo step closes after a quiet window."""
        if self._pending_base is None:
            self._pending_base = self._present
        self._present = snapshot
        self._cancel_timer()
        delay = self._coalesce_window if window is None else window
        self._timer = self._scheduler.call_later(delay, self._commit_pending)

    def _commit_pending(self) -> None:
        self._timer = None
        base, self._pending_base = self._pending_base, None
        if base is None:
            return
        if base == self._present:
            # Burst ended where it started; redo stays valid.
            logger.debug("Dropped coalesced burst with no net change")
            return
        self._push_past(base)
        self._future.clear()
        logger.debug("Committed coalesced history entry (past=%d)", len(self._past))

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def flush(self) -> bool:
        """Close a pending coalesced burst now. Returns True if one was open."""
        if self._pending_base is None:
            return False
        self._cancel_timer()
        self._commit_pending()
        return True

    # -- Navigation --

    def undo(self) -> bool:
        self.flush()
        if not self._past:
            return False
        self._future.insert(0, self._present)
        self._present = self._past.pop()
        return True

    def redo(self) -> bool:
        self.flush()
        if not self._future:
            return False
        self._push_past(self._present)
        self._present = self._future.pop(0)
        return True

    # -- Lifecycle --

    def _drop_pending(self) -> None:
        self._cancel_timer()
        self._pending_base = None

    def replace(self, snapshot: DiagramSnapshot) -> None:
        """Load boundary: new present, no undo or redo across it."""
        self._drop_pending()
        self._present = snapshot
        self._past.clear()
        self._future.clear()

    def reset(self) -> None:
        """Forget all history, keeping the present as the new baseline."""
        self._drop_pending()
        self._past.clear()
        self._future.clear()
