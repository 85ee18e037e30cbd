"""Observable notifications emitted by the price engine.

Events are plain frozen dataclasses handed synchronously to every registered
listener once the operation that produced them has committed. They never
influence engine state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnomalyDetected:
    """A fresh rate was rejected by the swing guard.

    :ivar previous_value: Last accepted value, recorded in its place.
    :ivar rejected_candidate: The rate that fell outside the bounds.
    :ivar timestamp: Time of the update that observed it.
    """

    previous_value: int
    rejected_candidate: int
    timestamp: int


@dataclass(frozen=True)
class AverageUpdated:
    """The published average was recomputed after an update.

    :ivar new_average: The new average index, scaled by BASE.
    :ivar timestamp: Time of the appended sample.
    """

    new_average: int
    timestamp: int


@dataclass(frozen=True)
class ConfigChanged:
    """An administrative setting was changed.

    :ivar name: Setting name (e.g., "window_size").
    :ivar old_value: Value before the change.
    :ivar new_value: Value after the change.
    """

    name: str
    old_value: Any
    new_value: Any


OracleEvent = Union[AnomalyDetected, AverageUpdated, ConfigChanged]
EventListener = Callable[[OracleEvent], None]


def emit(listeners: Iterable[EventListener], event: OracleEvent) -> None:
    """Deliver an event to every listener.

    A listener that raises is logged and skipped; the remaining listeners
    still receive the event.

    :param listeners: Registered listeners.
    :param event: Event to deliver.
    """
    for listener in listeners:
        try:
            listener(event)
        except Exception:
            logger.exception(f"Event listener {listener!r} failed on {event}")
