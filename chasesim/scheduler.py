"""Delayed callbacks driven by the host loop's clock.

The simulation is single threaded: nothing fires on its own. The host
advances the clock from ``update`` and due events run synchronously,
in the order they become due.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class ScheduledEvent:
    """Handle for a pending callback; ``cancel`` stops it from firing."""

    __slots__ = ("due", "callback", "label", "cancelled", "fired")

    def __init__(self, due: float, callback: Callable[[], None], label: str = ""):
        self.due = due
        self.callback = callback
        self.label = label
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """Cancel the event. Returns False if it already fired or was cancelled."""
        if not self.pending:
            return False
        self.cancelled = True
        return True


class EventScheduler:
    """Clock plus a list of pending ``ScheduledEvent`` objects."""

    def __init__(self):
        self.now = 0.0
        self._events: List[ScheduledEvent] = []

    def schedule(self, delay: float, callback: Callable[[], None], label: str = "") -> ScheduledEvent:
        event = ScheduledEvent(self.now + max(delay, 0.0), callback, label)
        self._events.append(event)
        logger.debug("Scheduled %s in %.2fs", label or "event", delay)
        return event

    def advance(self, dt: float) -> int:
        """Move the clock forward by ``dt`` and run the events that came due.

        Returns:
            Number of callbacks that ran
        """
        self.now += max(dt, 0.0)
        due = sorted(
            (e for e in self._events if e.pending and e.due <= self.now),
            key=lambda e: e.due,
        )
        for event in due:
            # An earlier callback may have cancelled this one.
            if not event.pending:
                continue
            event.fired = True
            event.callback()
        self._events = [e for e in self._events if e.pending]
        return len([e for e in due if e.fired])

    def cancel_all(self) -> int:
        cancelled = sum(1 for e in self._events if e.cancel())
        self._events = []
        return cancelled

    @property
    def pending(self) -> List[ScheduledEvent]:
        return [e for e in self._events if e.pending]
