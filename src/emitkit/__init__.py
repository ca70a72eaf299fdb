"""Typed in-process publish/subscribe primitives."""

from emitkit.kernel.emitter import Emitter
from emitkit.kernel.types import Listener, ListenerEntry

__all__ = ["Emitter", "Listener", "ListenerEntry"]
