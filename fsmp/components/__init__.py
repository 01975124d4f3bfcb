"""
Player components: queue, queue state storage, track catalog, audio player
and the playback controller that ties them together.
"""
from .queue_manager import QueueIndexError, QueueManager
from .queue_state import QueueSnapshot, RepeatMode, SnapshotFormatError
from .queue_state_store import QueueStateStore

__all__ = [
    "QueueManager",
    "QueueIndexError",
    "QueueSnapshot",
    "RepeatMode",
    "SnapshotFormatError",
    "QueueStateStore",
]
