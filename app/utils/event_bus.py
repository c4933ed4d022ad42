# app/utils/event_bus.py

import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

from config.logging_config import get_logger

logger = get_logger(__name__)

Handler = Callable[[str, Dict[str, Any]], None]


class EventBus:
    """Publica mudanças dos stores para quem quiser observar.

    Os handlers rodam de forma síncrona na thread que publicou.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, topic: str, handler: Handler) -> None:
        with self._lock:
            if handler not in self._handlers[topic]:
                self._handlers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        with self._lock:
            if handler in self._handlers[topic]:
                self._handlers[topic].remove(handler)

    def publish(self, topic: str, payload: Dict[str, Any]) -> int:
        with self._lock:
            handlers = list(self._handlers.get(topic, ()))

        logger.debug("event_published", topic=topic, subscribers=len(handlers), **payload)
        for handler in handlers:
            handler(topic, payload)
        return len(handlers)
