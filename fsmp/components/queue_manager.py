"""
Queue manager component for the fsmp music player.
Tracks the active queue, the current position, shuffle and repeat.
"""
import logging
import random
from typing import Callable, Iterable, List, Optional, Tuple

from .queue_state import QueueSnapshot, RepeatMode

logger = logging.getLogger("fsmp.queue")


class QueueIndexError(IndexError):
    """Raised by QueueManager.jump_to for a position outside the queue."""

    def __init__(self, index: int, count: int):
        super().__init__(
            f"index: {index} is out of range. Queue has {count} items."
        )
        self.index = index
        self.count = count


class QueueManager:
    """
    Manages the active playback queue.

    The queue only stores track ids. ``original_order`` is the order the
    queue was built in, ``play_order`` is the order navigation walks, and the
    two are the same list of ids unless shuffle is on.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize an empty queue.

        Args:
            rng: Random source used for shuffling. A process-seeded
                generator is created when omitted.
        """
        self._original_order: List[int] = []
        self._play_order: List[int] = []
        self._current_index: int = -1
        self._is_shuffled: bool = False
        self._repeat_mode: RepeatMode = RepeatMode.NONE
        self._random = rng if rng is not None else random.Random()
        self._on_queue_change_callback: Optional[Callable] = None

    @property
    def count(self) -> int:
        """Return the number of tracks in the queue."""
        return len(self._play_order)

    @property
    def current_index(self) -> int:
        """Return the current position in the play order, -1 when empty."""
        return self._current_index

    @property
    def current_track_id(self) -> Optional[int]:
        """Return the current track id or None if the queue is empty."""
        if 0 <= self._current_index < len(self._play_order):
            return self._play_order[self._current_index]
        return None

    @property
    def play_order(self) -> Tuple[int, ...]:
        """Return the order navigation steps through."""
        return tuple(self._play_order)

    @property
    def original_order(self) -> Tuple[int, ...]:
        """Return the order the queue was built in."""
        return tuple(self._original_order)

    @property
    def is_shuffled(self) -> bool:
        return self._is_shuffled

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._repeat_mode

    @repeat_mode.setter
    def repeat_mode(self, mode: RepeatMode) -> None:
        self._repeat_mode = RepeatMode(mode)
        self._notify_queue_change()

    @property
    def has_next(self) -> bool:
        """True when next_track() would return a track."""
        if not self._play_order:
            return False
        if self._repeat_mode in (RepeatMode.ONE, RepeatMode.ALL):
            return True
        return self._current_index < len(self._play_order) - 1

    @property
    def has_previous(self) -> bool:
        """True when previous_track() would return a track."""
        if not self._play_order:
            return False
        if self._repeat_mode in (RepeatMode.ONE, RepeatMode.ALL):
            return True
        return self._current_index > 0

    def set_queue(self, track_ids: Iterable[int]) -> None:
        """
        Replace the queue with the given track ids.

        Shuffle is turned off and the first track becomes current. The
        repeat mode is left as it is.

        Args:
            track_ids: Track ids in play order; duplicates are kept
        """
        self._original_order = list(track_ids)
        self._play_order = list(self._original_order)
        self._current_index = 0 if self._play_order else -1
        self._is_shuffled = False
        logger.debug("Queue set with %d tracks", len(self._play_order))
        self._notify_queue_change()

    def clear_queue(self) -> None:
        """Clear the entire queue."""
        self._original_order = []
        self._play_order = []
        self._current_index = -1
        self._is_shuffled = False
        self._notify_queue_change()

    def next_track(self) -> Optional[int]:
        """
        Move to the next track in the queue.

        Returns:
            The new current track id, or None if there is nowhere to go
        """
        if not self._play_order:
            return None

        if self._repeat_mode is RepeatMode.ONE:
            return self.current_track_id

        if self._current_index < len(self._play_order) - 1:
            self._current_index += 1
        elif self._repeat_mode is RepeatMode.ALL:
            self._current_index = 0
        else:
            return None

        self._notify_queue_change()
        return self.current_track_id

    def previous_track(self) -> Optional[int]:
        """
        Move to the previous track in the queue.

        Returns:
            The new current track id, or None if there is nowhere to go
        """
        if not self._play_order:
            return None

        if self._repeat_mode is RepeatMode.ONE:
            return self.current_track_id

        if self._current_index > 0:
            self._current_index -= 1
        elif self._repeat_mode is RepeatMode.ALL:
            self._current_index = len(self._play_order) - 1
        else:
            return None

        self._notify_queue_change()
        return self.current_track_id

    def jump_to(self, index: int) -> None:
        """
        Make the track at the given play order position current.

        Args:
            index: Position in the play order

        Raises:
            QueueIndexError: If index is negative or past the end of the queue
        """
        if index < 0 or index >= len(self._play_order):
            raise QueueIndexError(index, len(self._play_order))

        self._current_index = index
        self._notify_queue_change()

    def toggle_shuffle(self) -> None:
        """
        Switch between shuffled and original order.

        The current track stays current. When shuffling, it is moved to the
        front of the new play order so every other track is still ahead.
        Does nothing on an empty queue.
        """
        if not self._play_order:
            return

        current_track_id = self._play_order[self._current_index]
        self._play_order = list(self._original_order)

        if self._is_shuffled:
            self._is_shuffled = False
        else:
            self._random.shuffle(self._play_order)
            position = self._position_of(current_track_id)
            if position > 0:
                self._play_order[0], self._play_order[position] = (
                    self._play_order[position],
                    self._play_order[0],
                )
            self._is_shuffled = True

        position = self._position_of(current_track_id)
        if position < 0:
            position = 0 if self._play_order else -1
        self._current_index = position
        logger.debug("Shuffle %s", "on" if self._is_shuffled else "off")
        self._notify_queue_change()

    def get_state(self) -> QueueSnapshot:
        """Return a copy of the queue state that shares nothing with the queue."""
        return QueueSnapshot(
            original_order=list(self._original_order),
            play_order=list(self._play_order),
            current_index=self._current_index,
            repeat_mode=self._repeat_mode,
            is_shuffled=self._is_shuffled,
        )

    def restore_state(self, snapshot: QueueSnapshot) -> None:
        """
        Adopt a previously saved state.

        The snapshot is trusted apart from its current index, which is
        clamped into the play order (or set to -1 when it is empty).

        Args:
            snapshot: State returned by get_state() or loaded from disk
        """
        self._original_order = list(snapshot.original_order)
        self._play_order = list(snapshot.play_order)
        if self._play_order:
            self._current_index = min(max(snapshot.current_index, 0), len(self._play_order) - 1)
        else:
            self._current_index = -1
        self._repeat_mode = RepeatMode(snapshot.repeat_mode)
        self._is_shuffled = snapshot.is_shuffled
        logger.debug(
            "Queue restored: %d tracks, index %d", len(self._play_order), self._current_index
        )
        self._notify_queue_change()

    def _position_of(self, track_id: int) -> int:
        # First occurrence; -1 when a restored snapshot left the id out of original_order.
        try:
            return self._play_order.index(track_id)
        except ValueError:
            return -1

    def set_on_queue_change_callback(self, callback: Optional[Callable]) -> None:
        """
        Set callback for when queue changes.

        Args:
            callback: Function called with this queue manager after each change
        """
        self._on_queue_change_callback = callback

    def _notify_queue_change(self) -> None:
        """Notify listeners that the queue has changed."""
        if self._on_queue_change_callback:
            try:
                self._on_queue_change_callback(self)
            except Exception:
                logger.exception("Error in queue change callback")
