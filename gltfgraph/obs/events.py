"""Event bus primitives used to report degraded imports and exports."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from gltfgraph.graph.ids import utc_now

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class Event:
    """Simple event structure stored in the event bus."""

    ts: str
    level: str
    msg: str
    stage: str | None = None
    target_ids: List[int] = field(default_factory=list)
    extras: dict | None = None


@dataclass
class EventBus:
    """Append-only in-memory event bus.

    Every emitted event is mirrored to ``logger`` so callers that only look at
    logs see the same information.
    """

    events: List[Event] = field(default_factory=list)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("gltfgraph"))

    def emit(
        self,
        *,
        level: str,
        msg: str,
        stage: str | None = None,
        target_ids: Iterable[int] | None = None,
        extras: dict | None = None,
    ) -> Event:
        """Create and store a new :class:`Event`."""

        event = Event(
            ts=utc_now(),
            level=level,
            msg=msg,
            stage=stage,
            target_ids=list(target_ids or []),
            extras=extras,
        )
        self.events.append(event)
        self.logger.log(_LEVELS.get(level, logging.INFO), "[%s] %s", stage or "-", msg)
        return event

    def warn(self, msg: str, *, stage: str | None = None, target_ids: Iterable[int] | None = None, **extras) -> Event:
        """Shorthand for ``emit(level="warning", ...)``."""

        return self.emit(
            level="warning",
            msg=msg,
            stage=stage,
            target_ids=target_ids,
            extras=extras or None,
        )

    def warnings(self) -> tuple[Event, ...]:
        """Return only the warning events."""

        return tuple(event for event in self.events if event.level == "warning")

    def history(self) -> Iterable[Event]:
        """Return the chronological event history."""

        return tuple(self.events)
