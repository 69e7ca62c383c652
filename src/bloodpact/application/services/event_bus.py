from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, Tuple, Type


Handler = Callable[[object], None]


class EventBus:
    """Synchronous in-process publisher for turn and death notifications.

    Handlers run in ascending priority, ties broken by subscription order. A
    failing handler is logged and skipped so the rest still see the event.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[object], List[Tuple[int, int, Handler]]] = defaultdict(list)
        self._sequence = 0
        self._failures: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> None:
        rows = self._handlers[event_type]
        rows.append((int(priority), self._sequence, handler))
        rows.sort(key=lambda row: (row[0], row[1]))
        self._sequence += 1

    def unsubscribe(self, event_type: Type[object], handler: Handler) -> bool:
        rows = self._handlers.get(event_type, [])
        kept = [row for row in rows if row[2] is not handler]
        removed = len(kept) != len(rows)
        self._handlers[event_type] = kept
        return removed

    def publish(self, event: object) -> None:
        self._failures = []
        event_type = type(event)
        for priority, _, handler in list(self._handlers.get(event_type, [])):
            try:
                handler(event)
            except Exception as exc:
                self._failures.append(exc)
                self._logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": getattr(handler, "__qualname__", repr(handler)),
                        "priority": priority,
                    },
                )

    def last_publish_errors(self) -> List[Exception]:
        return list(self._failures)
