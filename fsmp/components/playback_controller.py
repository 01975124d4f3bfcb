"""
Playback controller for the fsmp music player.

Connects the queue manager, the track catalog and the audio player. User
transport commands and the player's end-of-track signal come in here; the
queue decides which track is next and the player plays it.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ..config import QUEUE_WINDOW_SIZE
from .queue_manager import QueueIndexError, QueueManager
from .queue_state import RepeatMode
from .queue_state_store import QueueStateStore
from .track_catalog import Track, TrackCatalog

logger = logging.getLogger("fsmp.controller")


@dataclass(frozen=True)
class Result:
    """Outcome of a playback command."""

    success: bool
    message: str = ""

    @classmethod
    def ok(cls, message: str = "") -> "Result":
        return cls(True, message)

    @classmethod
    def failure(cls, message: str) -> "Result":
        return cls(False, message)


@dataclass(frozen=True)
class QueueItem:
    """One row of the queue as shown to the user."""

    index: int
    title: str
    artist: str
    duration: Optional[float]
    is_current: bool


class PlaybackController:
    """Drives the queue and the audio player from user commands."""

    def __init__(
        self,
        audio_player,
        queue_manager: QueueManager,
        catalog: TrackCatalog,
        state_store: Optional[QueueStateStore] = None,
    ):
        """
        Initialize the controller.

        Args:
            audio_player: Player with load/play/stop/seek/resume and an end callback
            queue_manager: Active queue
            catalog: Lookup from track id to file
            state_store: Where the queue is saved between runs (optional)
        """
        if audio_player is None or queue_manager is None or catalog is None:
            raise ValueError("audio_player, queue_manager and catalog are required")
        self._player = audio_player
        self._queue = queue_manager
        self._catalog = catalog
        self._state_store = state_store
        self._track_end_subscribed = False
        # Serializes user commands and the player thread's end-of-track advance.
        self._lock = threading.RLock()

    @property
    def is_playing(self) -> bool:
        return self._player.is_currently_playing()

    @property
    def repeat_mode(self) -> RepeatMode:
        return self._queue.repeat_mode

    @property
    def is_shuffled(self) -> bool:
        return self._queue.is_shuffled

    @property
    def queue_count(self) -> int:
        return self._queue.count

    @property
    def current_index(self) -> int:
        return self._queue.current_index

    @property
    def has_next(self) -> bool:
        return self._queue.has_next

    @property
    def has_previous(self) -> bool:
        return self._queue.has_previous

    def play_track_by_id(self, track_id: int) -> Result:
        """
        Load and play a track from the catalog.

        Args:
            track_id: Id of the track to play

        Returns:
            Result of the command
        """
        track = self._catalog.get_by_id(track_id)
        if track is None:
            return Result.failure(f"Track {track_id} not found in library.")

        with self._lock:
            try:
                self._player.load(track.file_path)
                self._player.play()
            except Exception as e:
                logger.error("Playback error for %s: %s", track.file_path, e)
                return Result.failure(f"Playback error: {e}")

        logger.info("Playing %s - %s", track.display_artist, track.display_title)
        return Result.ok()

    def next_track(self) -> Result:
        with self._lock:
            next_id = self._queue.next_track()
            if next_id is not None:
                return self.play_track_by_id(next_id)

            try:
                self._player.stop()
            except Exception as e:
                return Result.failure(f"Error: {e}")
            return Result.failure("End of queue.")

    def previous_track(self) -> Result:
        with self._lock:
            prev_id = self._queue.previous_track()
            if prev_id is not None:
                return self.play_track_by_id(prev_id)
            return Result.failure("Beginning of queue.")

    def auto_advance(self) -> Result:
        """
        Advance after the current track finished; the player is left alone at the end.

        Runs on the player's polling thread. If a user command holds the
        controller at that moment, that command already decides what plays
        next and the advance is skipped.
        """
        if not self._lock.acquire(blocking=False):
            logger.debug("Skipping auto advance, another command is running")
            return Result.failure("Another command is in progress.")
        try:
            next_id = self._queue.next_track()
            if next_id is not None:
                return self.play_track_by_id(next_id)
            return Result.failure("End of queue.")
        finally:
            self._lock.release()

    def toggle_play_stop(self) -> Result:
        with self._lock:
            try:
                if self.is_playing:
                    self._player.stop()
                    return Result.ok()
            except Exception as e:
                return Result.failure(f"Error: {e}")

            track_id = self._queue.current_track_id
            if track_id is None:
                return Result.failure("No track selected.")
            return self.play_track_by_id(track_id)

    def restart_track(self) -> Result:
        with self._lock:
            if self._queue.current_track_id is None:
                return Result.failure("No track selected.")
            try:
                self._player.seek(0)
                self._player.resume()
            except Exception as e:
                return Result.failure(f"Error: {e}")
            return Result.ok()

    def stop(self) -> Result:
        with self._lock:
            try:
                self._player.stop()
            except Exception as e:
                return Result.failure(f"Error: {e}")
            return Result.ok()

    def toggle_repeat_mode(self) -> Result:
        with self._lock:
            self._queue.repeat_mode = self._queue.repeat_mode.next_mode()
            return Result.ok(f"Repeat: {self._queue.repeat_mode.value}")

    def toggle_shuffle(self) -> Result:
        with self._lock:
            if self._queue.count == 0:
                return Result.failure("No tracks in queue to shuffle.")
            self._queue.toggle_shuffle()
            return Result.ok(f"Shuffle: {'on' if self._queue.is_shuffled else 'off'}")

    def jump_to(self, queue_index: int) -> Result:
        with self._lock:
            try:
                self._queue.jump_to(queue_index)
            except QueueIndexError:
                return Result.failure("Invalid queue position.")

            track_id = self._queue.current_track_id
            if track_id is None:
                return Result.failure("No track at that position.")
            return self.play_track_by_id(track_id)

    def get_current_track(self) -> Optional[Track]:
        with self._lock:
            track_id = self._queue.current_track_id
        if track_id is None:
            return None
        return self._catalog.get_by_id(track_id)

    def get_queue_items(self, truncate: bool = True) -> List[QueueItem]:
        """
        Describe the queue for display.

        Args:
            truncate: Only return a window of entries around the current
                track when the queue is long

        Returns:
            Queue rows in play order
        """
        with self._lock:
            play_order = self._queue.play_order
            current_index = self._queue.current_index

        start, end = 0, len(play_order)
        if truncate and len(play_order) > QUEUE_WINDOW_SIZE + 1:
            start = max(0, current_index - 4)
            end = start + QUEUE_WINDOW_SIZE
            if end > len(play_order):
                end = len(play_order)
                start = max(0, end - QUEUE_WINDOW_SIZE)

        items = []
        for index in range(start, end):
            track = self._catalog.get_by_id(play_order[index])
            items.append(
                QueueItem(
                    index=index,
                    title=track.display_title if track else "Unknown",
                    artist=track.display_artist if track else "",
                    duration=track.duration if track else None,
                    is_current=index == current_index,
                )
            )
        return items

    def set_queue(self, track_ids: Iterable[int]) -> None:
        with self._lock:
            self._queue.set_queue(track_ids)

    def append_to_queue(self, track_ids: Iterable[int]) -> None:
        """
        Add tracks to the end of the queue, skipping ids already queued.

        The current track and the shuffle setting are kept.
        """
        track_ids = list(track_ids)
        with self._lock:
            if self._queue.count == 0:
                self._queue.set_queue(track_ids)
                return

            queue = list(self._queue.play_order)
            current_index = self._queue.current_index
            was_shuffled = self._queue.is_shuffled

            for track_id in track_ids:
                if track_id not in queue:
                    queue.append(track_id)

            self._queue.set_queue(queue)
            if current_index >= 0:
                self._queue.jump_to(current_index)
            if was_shuffled:
                self._queue.toggle_shuffle()

    def subscribe_to_track_end(self, on_track_ended: Callable[[], None]) -> None:
        """Call on_track_ended whenever the player finishes a track. Only the first subscription is kept."""
        if self._track_end_subscribed:
            return
        self._track_end_subscribed = True
        self._player.set_on_end_callback(on_track_ended)

    def save_state(self) -> bool:
        """
        Save the queue to the state store.

        Returns:
            True if the state was written
        """
        if self._state_store is None:
            return False
        with self._lock:
            snapshot = self._queue.get_state()
        try:
            self._state_store.save(snapshot)
        except OSError as e:
            logger.error("Could not save queue state: %s", e)
            return False
        return True

    def restore_state(self) -> bool:
        """
        Restore the queue saved by a previous run.

        Returns:
            True if a saved queue was found and restored
        """
        if self._state_store is None:
            return False
        snapshot = self._state_store.load()
        if snapshot is None:
            return False
        with self._lock:
            self._queue.restore_state(snapshot)
            count = self._queue.count
        logger.info("Restored queue with %d tracks", count)
        return True
