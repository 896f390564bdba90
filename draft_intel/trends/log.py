"""
Append-only draft event log with bounded trailing windows.

One ``DraftEventLog`` belongs to one draft session. Events are validated on
append (pick order must strictly increase) and never mutated or removed.
Trailing windows of the sizes the detectors read (5, 8, 10 and 20 by
default) are maintained incrementally, so detectors that only look at
recent picks do not rescan the full log.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Iterator, Optional

from draft_intel.errors import EventOrderError
from draft_intel.models.draft import DraftEvent

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZES: tuple[int, ...] = (5, 8, 10, 20)


class DraftEventLog:
    """Ordered, append-only sequence of ``DraftEvent`` objects.

    Args:
        window_sizes: Trailing window sizes to maintain.
        events:       Optional initial events, appended in order.

    Raises:
        EventOrderError: If any initial event breaks strict pick ordering.
    """

    def __init__(
        self,
        window_sizes: Iterable[int] = DEFAULT_WINDOW_SIZES,
        events: Optional[Iterable[DraftEvent]] = None,
    ) -> None:
        self._events: list[DraftEvent] = []
        self._windows: dict[int, deque[DraftEvent]] = {
            size: deque(maxlen=size) for size in sorted(set(window_sizes)) if size > 0
        }
        for event in events or ():
            self.append(event)

    def append(self, event: DraftEvent) -> None:
        """Append one event.

        Raises:
            EventOrderError: If ``event.order`` does not exceed the last order.
        """
        if self._events and event.order <= self._events[-1].order:
            raise EventOrderError(
                f"Pick {event.order} arrived after pick {self._events[-1].order}; "
                "draft event order must strictly increase."
            )
        self._events.append(event)
        for window in self._windows.values():
            window.append(event)
        logger.debug("Ingested pick %d (%s, %s)", event.order, event.candidate_id, event.category)

    def window(self, size: int) -> list[DraftEvent]:
        """Return the trailing ``size`` events, oldest first."""
        if size <= 0:
            return []
        maintained = self._windows.get(size)
        if maintained is not None:
            return list(maintained)
        return self._events[-size:]

    @property
    def events(self) -> list[DraftEvent]:
        return list(self._events)

    @property
    def last(self) -> Optional[DraftEvent]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[DraftEvent]:
        return iter(list(self._events))
