"""
Progress events for an orchestration run.

The orchestrator publishes run-level and segment-level events on an
optional EventBus; listeners (progress bars, metrics exporters, tests)
subscribe per event type.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List
import time
import traceback

from vocabflow.utils.unified_logger import LogType, get_logger

Listener = Callable[["Event"], None]


class EventType(Enum):
    """What happened."""

    PROCESSING_STARTED = "processing_started"
    PROCESSING_COMPLETED = "processing_completed"

    CHUNK_STARTED = "chunk_started"
    CHUNK_COMPLETED = "chunk_completed"
    CHUNK_FAILED = "chunk_failed"


@dataclass
class Event:
    """One published event.

    Attributes:
        type: Event type
        data: Payload; segment events carry segment_id, position and total_segments
        timestamp: Unix time of creation
        source: Publisher name
    """
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    source: str = "unknown"


class EventBus:
    """Synchronous publish/subscribe with optional history recording."""

    def __init__(self):
        self._listeners: Dict[EventType, List[Listener]] = {}
        self._history: List[Event] = []
        self._record_history = False

    def subscribe(self, event_type: EventType, callback: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def subscribe_multiple(self, event_types: List[EventType], callback: Listener) -> None:
        for event_type in event_types:
            self.subscribe(event_type, callback)

    def unsubscribe(self, event_type: EventType, callback: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def publish(self, event: Event) -> None:
        """
        Deliver an event to its listeners in subscription order.

        A listener that raises is logged and skipped; the publisher and the
        remaining listeners are unaffected.
        """
        if self._record_history:
            self._history.append(event)

        for listener in list(self._listeners.get(event.type, ())):
            try:
                listener(event)
            except Exception as e:
                get_logger().error(
                    f"Listener for {event.type.value} failed: {e}",
                    LogType.ERROR_DETAIL,
                    {'traceback': traceback.format_exc()}
                )

    def enable_history(self) -> None:
        self._record_history = True

    def disable_history(self) -> None:
        self._record_history = False

    def get_history(self) -> List[Event]:
        """Recorded events, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def get_events_by_type(self, event_type: EventType) -> List[Event]:
        return [event for event in self._history if event.type == event_type]


def create_chunk_event(event_type: EventType, segment_id: str, position: int,
                       total_segments: int, **extra) -> Event:
    """
    Build a segment-level event.

    Args:
        event_type: One of the CHUNK_* types
        segment_id: Segment identifier ("chunk-N")
        position: 1-based position
        total_segments: Segments in the run
        **extra: Additional payload (word count, error code, stage...)
    """
    data = {
        "segment_id": segment_id,
        "position": position,
        "total_segments": total_segments,
        **extra,
    }
    return Event(type=event_type, data=data, source="orchestrator")
