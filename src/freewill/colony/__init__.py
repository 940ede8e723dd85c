"""Colony snapshots and the reference work-assignment store."""

from .snapshot import (
    ColonySnapshot,
    agent_from_dict,
    load_snapshot,
    snapshot_from_dict,
    world_from_dict,
)
from .store import InMemoryWorkStore

__all__ = [
    "ColonySnapshot",
    "InMemoryWorkStore",
    "agent_from_dict",
    "load_snapshot",
    "snapshot_from_dict",
    "world_from_dict",
]
