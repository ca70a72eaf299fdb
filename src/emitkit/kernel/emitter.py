"""In-process typed event emitter for decoupled listeners."""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, Generic, List, Optional

from emitkit.kernel.debug_log import DebugLogWriter
from emitkit.kernel.types import (
    EventKeyT,
    Listener,
    ListenerEntry,
    PayloadT,
    describe_event_key,
    describe_listener,
    new_id,
)


class Emitter(Generic[EventKeyT, PayloadT]):
    """Synchronous pub-sub registry scoped to one process.

    Listeners for a key fire in registration order (``prepend_on`` jumps the
    queue). ``emit`` dispatches over a snapshot taken before the first
    callback runs, so listeners that register or remove listeners while the
    event is being delivered only affect later emits. Listener exceptions are
    not caught; they abort the rest of the dispatch and reach the caller.

    The mapping is guarded by a lock, but callbacks always run with the lock
    released.
    """

    def __init__(
        self,
        *,
        copy_payloads: bool = False,
        debug_log: Optional[DebugLogWriter] = None,
        log_payloads: bool = False,
        emitter_id: Optional[str] = None,
    ) -> None:
        self._listeners: Dict[EventKeyT, List[ListenerEntry]] = {}
        self._lock = threading.Lock()
        self._copy_payloads = bool(copy_payloads)
        self._debug_log = debug_log
        self._log_payloads = bool(log_payloads)
        self.emitter_id = str(emitter_id or new_id("emitter"))

    @property
    def copy_payloads(self) -> bool:
        return self._copy_payloads

    def on(self, event: EventKeyT, listener: Listener[PayloadT]) -> Listener[PayloadT]:
        self._add(event, ListenerEntry(callback=listener), prepend=False)
        return listener

    def prepend_on(self, event: EventKeyT, listener: Listener[PayloadT]) -> Listener[PayloadT]:
        self._add(event, ListenerEntry(callback=listener), prepend=True)
        return listener

    def once(self, event: EventKeyT, listener: Listener[PayloadT]) -> None:
        self._add(event, ListenerEntry(callback=listener, once=True), prepend=False)

    def off(self, event: EventKeyT, listener: Listener[PayloadT]) -> None:
        removed = False
        with self._lock:
            entries = self._listeners.get(event)
            if not entries:
                return
            for index, entry in enumerate(entries):
                if entry.callback is listener:
                    del entries[index]
                    removed = True
                    break
            if not entries:
                del self._listeners[event]
        if removed:
            self._log(
                kind="listener.removed",
                event=event,
                message="off:{0}".format(describe_listener(listener)),
            )

    def emit(self, event: EventKeyT, data: PayloadT, do_copy: Optional[bool] = None) -> None:
        with self._lock:
            entries = self._listeners.get(event)
            if not entries:
                return
            snapshot = list(entries)

        copy_payload = self._copy_payloads if do_copy is None else bool(do_copy)
        details: Dict[str, Any] = {
            "listener_count": len(snapshot),
            "copied": copy_payload,
        }
        if self._log_payloads:
            details["payload"] = data
        self._log(kind="event.emitted", event=event, message="emit", data=details)

        for entry in snapshot:
            if entry.once and not self._claim_once(event, entry):
                continue
            payload = copy.copy(data) if copy_payload else data
            try:
                entry.callback(payload)
            except Exception as exc:
                self._log(
                    kind="listener.raised",
                    event=event,
                    level="error",
                    message=type(exc).__name__,
                    data={"listener": describe_listener(entry.callback), "error": exc},
                )
                raise

    def listeners(self, event: EventKeyT) -> List[Listener[PayloadT]]:
        with self._lock:
            return [entry.callback for entry in self._listeners.get(event, [])]

    def listener_count(self, event: EventKeyT) -> int:
        with self._lock:
            return len(self._listeners.get(event, []))

    def event_names(self) -> List[EventKeyT]:
        with self._lock:
            return list(self._listeners.keys())

    def remove_all_listeners(self, event: Optional[EventKeyT] = None) -> None:
        with self._lock:
            if event is None:
                cleared = sum(len(entries) for entries in self._listeners.values())
                self._listeners.clear()
            else:
                cleared = len(self._listeners.pop(event, []))
        if cleared:
            self._log(
                kind="listeners.cleared",
                event=event,
                message="remove_all_listeners",
                data={"removed": cleared, "scope": "all" if event is None else "event"},
            )

    def _add(self, event: EventKeyT, entry: ListenerEntry, prepend: bool) -> None:
        with self._lock:
            entries = self._listeners.setdefault(event, [])
            if prepend:
                entries.insert(0, entry)
            else:
                entries.append(entry)
        self._log(
            kind="listener.added",
            event=event,
            message="{0}:{1}".format(
                "prepend_on" if prepend else ("once" if entry.once else "on"),
                describe_listener(entry.callback),
            ),
        )

    def _claim_once(self, event: EventKeyT, target: ListenerEntry) -> bool:
        """Mark a one-shot entry fired and drop it from the live list.

        Returns False when another dispatch (nested or on another thread)
        already claimed it. An entry removed by ``off`` after the snapshot was
        taken is still unclaimed and fires from that snapshot.
        """
        with self._lock:
            if target.fired:
                return False
            target.fired = True
            entries = self._listeners.get(event)
            if not entries:
                return True
            for index, entry in enumerate(entries):
                if entry is target:
                    del entries[index]
                    break
            if not entries:
                del self._listeners[event]
            return True

    def _log(
        self,
        *,
        kind: str,
        event: Any,
        message: str,
        level: str = "debug",
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        if self._debug_log is None:
            return
        self._debug_log.write_entry(
            level=level,
            component="emitter",
            kind=kind,
            emitter_id=self.emitter_id,
            event_key=describe_event_key(event) if event is not None else None,
            message=message,
            data=data,
        )
