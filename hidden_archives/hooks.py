"""
Named action/filter hooks.

Handlers are bound at application start. Lower priority numbers run first;
handlers with equal priority run in registration order.
"""

import logging
from collections import defaultdict
from itertools import count
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 10


class HookRegistry:
    def __init__(self):
        self._hooks: Dict[str, List[Tuple[int, int, Callable]]] = defaultdict(list)
        self._sequence = count()

    def add(self, name: str, handler: Callable, priority: int = DEFAULT_PRIORITY) -> None:
        entries = self._hooks[name]
        entries.append((priority, next(self._sequence), handler))
        entries.sort(key=lambda entry: (entry[0], entry[1]))
        logger.debug(f"Hook registered: {name} -> {getattr(handler, '__name__', handler)} ({priority})")

    # Actions and filters share one table; the split is about call style.
    add_action = add
    add_filter = add

    def handlers(self, name: str) -> List[Callable]:
        return [entry[2] for entry in self._hooks.get(name, [])]

    def names(self) -> List[str]:
        return sorted(name for name, entries in self._hooks.items() if entries)

    def do_action(self, name: str, *args) -> None:
        for handler in self.handlers(name):
            handler(*args)

    def dispatch_until(self, name: str, *args) -> Any:
        """Run handlers in order and return the first non-None result."""
        for handler in self.handlers(name):
            result = handler(*args)
            if result is not None:
                return result
        return None

    def collect(self, name: str, *args) -> List[Any]:
        """Non-None results of every handler, in order."""
        results = []
        for handler in self.handlers(name):
            result = handler(*args)
            if result is not None:
                results.append(result)
        return results

    def apply_filters(self, name: str, value: Any, *args) -> Any:
        for handler in self.handlers(name):
            value = handler(value, *args)
        return value
