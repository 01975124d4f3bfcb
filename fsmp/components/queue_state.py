"""
Queue state values for the active playlist.

Holds the repeat policy enum and the plain snapshot that is written to disk
and handed back to the queue manager on startup.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class RepeatMode(Enum):
    """Policy applied when navigation reaches either end of the queue."""

    NONE = "None"
    ONE = "One"
    ALL = "All"

    def next_mode(self) -> "RepeatMode":
        """Return the mode that follows this one in the None -> One -> All cycle."""
        order = [RepeatMode.NONE, RepeatMode.ONE, RepeatMode.ALL]
        return order[(order.index(self) + 1) % len(order)]


class SnapshotFormatError(ValueError):
    """Raised when saved queue data does not have the expected shape."""


def _int_list(data: Dict[str, Any], key: str) -> List[int]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in value
    ):
        raise SnapshotFormatError(f"{key} must be a list of integers")
    return list(value)


@dataclass
class QueueSnapshot:
    """Serializable copy of the queue manager state."""

    original_order: List[int] = field(default_factory=list)
    play_order: List[int] = field(default_factory=list)
    current_index: int = -1
    repeat_mode: RepeatMode = RepeatMode.NONE
    is_shuffled: bool = False

    def copy(self) -> "QueueSnapshot":
        """Return an independent copy; no list is shared with this snapshot."""
        return QueueSnapshot(
            original_order=list(self.original_order),
            play_order=list(self.play_order),
            current_index=self.current_index,
            repeat_mode=self.repeat_mode,
            is_shuffled=self.is_shuffled,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the on-disk JSON layout.

        Returns:
            Dictionary with OriginalOrder, PlayOrder, CurrentIndex, RepeatMode
            and IsShuffled keys
        """
        return {
            "OriginalOrder": list(self.original_order),
            "PlayOrder": list(self.play_order),
            "CurrentIndex": self.current_index,
            "RepeatMode": self.repeat_mode.value,
            "IsShuffled": self.is_shuffled,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueueSnapshot":
        """
        Build a snapshot from the on-disk JSON layout.

        Missing keys fall back to the values of an empty snapshot.

        Args:
            data: Decoded JSON object

        Returns:
            The snapshot

        Raises:
            SnapshotFormatError: If a key holds a value of the wrong type
        """
        if not isinstance(data, dict):
            raise SnapshotFormatError("queue state must be a JSON object")

        current_index = data.get("CurrentIndex", -1)
        if not isinstance(current_index, int) or isinstance(current_index, bool):
            raise SnapshotFormatError("CurrentIndex must be an integer")

        is_shuffled = data.get("IsShuffled", False)
        if not isinstance(is_shuffled, bool):
            raise SnapshotFormatError("IsShuffled must be a boolean")

        try:
            repeat_mode = RepeatMode(data.get("RepeatMode", RepeatMode.NONE.value))
        except ValueError as e:
            raise SnapshotFormatError(f"Unknown RepeatMode: {data.get('RepeatMode')!r}") from e

        return cls(
            original_order=_int_list(data, "OriginalOrder"),
            play_order=_int_list(data, "PlayOrder"),
            current_index=current_index,
            repeat_mode=repeat_mode,
            is_shuffled=is_shuffled,
        )
