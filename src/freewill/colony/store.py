"""In-memory task-assignment store, the reference target for applied priorities."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class InMemoryWorkStore:
    """Per-agent priority levels keyed by task category."""

    use_work_priorities: bool = False
    priorities: dict[str, dict[str, int]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def set_priority(self, agent_id: str, task: str, level: int) -> None:
        with self._lock:
            self.priorities.setdefault(agent_id, {})[task] = level

    def get_priority(self, agent_id: str, task: str) -> int:
        return self.priorities.get(agent_id, {}).get(task, 0)
