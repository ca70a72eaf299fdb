"""Core typed contracts shared by the emitter, debug log and runtime."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, TypeVar

# Narrower emitters extend a parent's vocabulary by widening the key type,
# e.g. ``Union[BaseEvents, Literal["extra"]]``.
EventKeyT = TypeVar("EventKeyT", bound=Hashable)
PayloadT = TypeVar("PayloadT")

Listener = Callable[[PayloadT], Any]


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id(prefix: str) -> str:
    return "{0}_{1}".format(prefix, uuid.uuid4().hex)


@dataclass(eq=False)
class ListenerEntry:
    """One registration slot; equality is identity so duplicates stay distinct.

    ``fired`` is only meaningful for one-shot entries: it is claimed under the
    emitter lock by exactly one dispatch, however many snapshots hold the entry.
    """

    callback: Callable[[Any], Any]
    once: bool = False
    fired: bool = field(default=False, repr=False)


def describe_event_key(event: Hashable) -> str:
    if isinstance(event, str):
        return event
    name = getattr(event, "name", None)
    if isinstance(name, str) and name:
        return "{0}.{1}".format(type(event).__name__, name)
    return repr(event)


def describe_listener(listener: Callable[..., Any]) -> str:
    qualname = getattr(listener, "__qualname__", None)
    if isinstance(qualname, str) and qualname:
        module = getattr(listener, "__module__", None) or ""
        return "{0}.{1}".format(module, qualname) if module else qualname
    return repr(listener)
