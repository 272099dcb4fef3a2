"""Recent-activity display buffer fed by polling and by streamed insert events.

Newest first, at most `size` entries. Pushed and polled entries are not
deduplicated against each other.
"""
from collections import deque
from typing import Any, Iterable, Mapping

from learning_dashboard.client.demo import DEMO_ACTIVITY


class ActivityFeed:
    def __init__(self, size: int = 3, initial: Iterable[Mapping[str, str]] = DEMO_ACTIVITY):
        self.size = size
        self._items: deque[dict[str, str]] = deque(maxlen=size)
        self.replace(initial)

    def push(self, name: str, action: str, time: str = "just now") -> None:
        self._items.appendleft({"name": name, "action": action, "time": time})

    def push_event(self, event: Mapping[str, Any]) -> None:
        """One decoded /api/activity-stream event; extra keys (table, row_id) are ignored."""
        self.push(event["name"], event["action"], event.get("time") or "just now")

    def replace(self, items: Iterable[Mapping[str, str]]) -> None:
        """Swap in a polled list (already newest first)."""
        self._items.clear()
        for item in list(items)[: self.size]:
            self._items.append({"name": item["name"], "action": item["action"], "time": item["time"]})

    @property
    def items(self) -> list[dict[str, str]]:
        return [dict(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)
