# Adapters between the inventory services and the engine

from .snapshot_loader import LoadedSnapshot, SnapshotLoader
from .change_feed import ChangeFeed, ChangeKind, ChangeNotification, InventoryMonitor

__all__ = [
    "LoadedSnapshot",
    "SnapshotLoader",
    "ChangeFeed",
    "ChangeKind",
    "ChangeNotification",
    "InventoryMonitor",
]
