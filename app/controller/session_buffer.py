from __future__ import annotations
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import structlog

from core.errors import InvalidEvent, InvalidEventOrder
from core.events import EditEvent, assemble_text, mono_ts, validate_events

log = structlog.get_logger()

class SessionBuffer:
    """
    Host-owned accumulator for one input session.
    Events are checked for temporal order on push; the whole prefix is handed
    to the stateless analyzers via snapshot().
    """
    def __init__(self, session_id: Optional[str] = None):
        self._lock = threading.RLock()
        self._events: List[EditEvent] = []
        self.session_id = session_id

    def push(self, ev: EditEvent) -> None:
        with self._lock:
            if self._events and ev.t_mono < self._events[-1].t_mono:
                raise InvalidEventOrder(len(self._events), self._events[-1].t_mono, ev.t_mono)
            self._events.append(ev)
        log.debug("session.push", session=self.session_id, inserted=ev.inserted_length, deleted=ev.deleted_length)

    def record(self, inserted_text: str = "", deleted_length: int = 0, t_mono: Optional[float] = None) -> EditEvent:
        """Stamp and push an edit observed right now (or at t_mono)."""
        ev = EditEvent(
            t_mono=mono_ts() if t_mono is None else t_mono,
            inserted_text=inserted_text,
            deleted_length=deleted_length,
        )
        self.push(ev)
        return ev

    def extend(self, events: Iterable[EditEvent]) -> None:
        """Append a batch all-or-nothing: an out-of-order event leaves the buffer untouched."""
        batch = validate_events(events)
        if not batch:
            return
        with self._lock:
            if self._events and batch[0].t_mono < self._events[-1].t_mono:
                raise InvalidEventOrder(len(self._events), self._events[-1].t_mono, batch[0].t_mono)
            self._events.extend(batch)
        log.debug("session.extend", session=self.session_id, count=len(batch))

    def snapshot(self) -> Tuple[EditEvent, ...]:
        with self._lock:
            return tuple(self._events)

    def text(self) -> str:
        return assemble_text(self.snapshot())

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    # --- import / export ---

    def export_records(self) -> List[Dict[str, Any]]:
        return [ev.to_record() for ev in self.snapshot()]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]], session_id: Optional[str] = None) -> "SessionBuffer":
        if isinstance(records, (str, bytes)) or not isinstance(records, Iterable):
            raise InvalidEvent("event records must be a list of objects")
        buf = cls(session_id=session_id)
        buf.extend(EditEvent.from_record(rec) for rec in records)
        return buf
