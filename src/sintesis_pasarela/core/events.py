"""
Typed observer registry for gateway lifecycle events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

__all__ = [
    "ErrorEvent",
    "EventEmitter",
    "EventKind",
    "LoadEvent",
    "SuccessEvent",
    "TokenExpiredEvent",
]

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    LOAD = "load"
    TOKEN_EXPIRED = "token_expired"


@dataclass(frozen=True)
class SuccessEvent:
    access_token: str
    embed_url: str
    environment: str
    timestamp: str


@dataclass(frozen=True)
class ErrorEvent:
    context: str
    message: str
    error: BaseException
    environment: str
    timestamp: str
    status: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LoadEvent:
    result: Any


@dataclass(frozen=True)
class TokenExpiredEvent:
    refreshed: bool
    new_token: Optional[str]


Handler = Callable[[Any], None]


class EventEmitter:
    """
    Handlers are called synchronously in registration order. A handler that
    raises is logged and skipped; the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventKind, List[Handler]] = {kind: [] for kind in EventKind}

    def on(self, kind: EventKind | str, handler: Handler) -> Callable[[], None]:
        event_kind = EventKind(kind)
        self._handlers[event_kind].append(handler)

        def unsubscribe() -> None:
            self.off(event_kind, handler)

        return unsubscribe

    def off(self, kind: EventKind | str, handler: Handler) -> None:
        handlers = self._handlers[EventKind(kind)]
        if handler in handlers:
            handlers.remove(handler)

    def handlers(self, kind: EventKind | str) -> List[Handler]:
        return list(self._handlers[EventKind(kind)])

    def emit(self, kind: EventKind, payload: Any) -> None:
        for handler in self.handlers(kind):
            try:
                handler(payload)
            except Exception:  # noqa: BLE001
                logger.exception("Error in %s handler %r", kind.value, handler)
