"""
Audio playback functionality using VLC.
"""
import logging
import os
import threading
import time
from enum import Enum
from typing import Callable, Optional

import vlc

logger = logging.getLogger("fsmp.player")


class PlaybackState(Enum):
    """Playback state reported by the audio player."""

    STOPPED = "stopped"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"


class AudioPlayer:
    """Audio player class that plays local files through VLC."""

    def __init__(self, instance=None):
        """
        Initialize VLC instance and player.

        Args:
            instance: Existing vlc.Instance to use, created when omitted
        """
        self.instance = instance if instance is not None else vlc.Instance("--no-xlib", "--no-video")
        self.player = self.instance.media_player_new()
        self.media = None
        self.file_path: Optional[str] = None
        self._state = PlaybackState.STOPPED
        self._position_callback: Optional[Callable] = None
        self._on_end_callback: Optional[Callable] = None
        self._state_change_callback: Optional[Callable] = None
        self._update_thread: Optional[threading.Thread] = None
        self._running = False

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def volume(self) -> float:
        """Volume between 0.0 and 1.0."""
        return max(self.player.audio_get_volume(), 0) / 100

    @volume.setter
    def volume(self, value: float) -> None:
        self.player.audio_set_volume(int(min(max(value, 0.0), 1.0) * 100))

    @property
    def muted(self) -> bool:
        return bool(self.player.audio_get_mute())

    @muted.setter
    def muted(self, value: bool) -> None:
        self.player.audio_set_mute(bool(value))

    def load(self, file_path: str) -> None:
        """
        Load a local audio file, stopping whatever is playing.

        Args:
            file_path: Path to the audio file

        Raises:
            ValueError: If file_path is empty
            FileNotFoundError: If the file does not exist
        """
        if not file_path or not str(file_path).strip():
            raise ValueError("File path cannot be empty.")
        if not os.path.isfile(file_path):
            raise FileNotFoundError(f"Audio file not found: {file_path}")

        self.stop()
        if self.media is not None:
            self.media.release()

        self.file_path = str(file_path)
        self._set_state(PlaybackState.LOADING)
        self.media = self.instance.media_new_path(self.file_path)
        self.media.parse()
        self.player.set_media(self.media)
        self._set_state(PlaybackState.STOPPED)

    def play(self) -> None:
        """
        Start playing the loaded file.

        Raises:
            RuntimeError: If no file has been loaded
        """
        if self.media is None:
            raise RuntimeError("No media loaded. Call load() first.")

        if self.player.play() == -1:
            self._set_state(PlaybackState.ERROR)
            raise RuntimeError(f"VLC could not play {self.file_path}")

        # Wait until VLC reports it's playing
        for _ in range(30):
            if self.player.get_state() == vlc.State.Playing:
                break
            time.sleep(0.1)
        self._set_state(PlaybackState.PLAYING)

        self._running = True
        self._update_thread = threading.Thread(target=self._update_position, daemon=True)
        self._update_thread.start()

    def _update_position(self):
        """Thread that updates the position and checks for track end."""
        while self._running:
            state = self.player.get_state()
            if state == vlc.State.Ended:
                self._running = False
                self._set_state(PlaybackState.STOPPED)
                if self._on_end_callback:
                    try:
                        self._on_end_callback()
                    except Exception:
                        logger.exception("Error in end callback")
                break
            if state == vlc.State.Error:
                self._running = False
                self._set_state(PlaybackState.ERROR)
                logger.error("VLC encountered a playback error: %s", self.file_path)
                break

            if self._state is PlaybackState.PLAYING and self._position_callback:
                duration_sec = self.get_duration()
                if duration_sec > 0:
                    try:
                        self._position_callback(self.get_current_time(), duration_sec)
                    except Exception:
                        logger.exception("Error in position callback")

            # Sleep briefly to avoid consuming too much CPU
            time.sleep(0.25)

    def set_position_callback(self, callback):
        """
        Set the callback function for position updates.

        Args:
            callback: Function to call with position updates (position_sec, duration_sec)
        """
        self._position_callback = callback

    def set_on_end_callback(self, callback):
        """
        Set the callback function for end of playback.

        Args:
            callback: Function to call when playback ends
        """
        self._on_end_callback = callback

    def set_state_change_callback(self, callback):
        """
        Set the callback function for state changes.

        Args:
            callback: Function to call with (old_state, new_state)
        """
        self._state_change_callback = callback

    def pause(self):
        """Pause playback."""
        if self._state is PlaybackState.PLAYING:
            self.player.set_pause(1)
            self._set_state(PlaybackState.PAUSED)

    def resume(self):
        """Resume playback after pause."""
        if self._state is PlaybackState.PAUSED:
            self.player.set_pause(0)
            self._set_state(PlaybackState.PLAYING)
        elif self._state is PlaybackState.STOPPED and self.media is not None:
            self.play()

    def toggle_pause(self):
        """Toggle between play and pause."""
        if self._state is PlaybackState.PAUSED:
            self.resume()
        else:
            self.pause()

    def seek(self, seconds: float) -> None:
        """Move the playback position."""
        self.player.set_time(int(max(seconds, 0) * 1000))

    def stop(self):
        """Stop playback completely."""
        # Signal thread to stop
        self._running = False

        if self._state in (PlaybackState.PLAYING, PlaybackState.PAUSED):
            self.player.stop()
            self._set_state(PlaybackState.STOPPED)

        # Wait for thread to terminate
        if (
            self._update_thread
            and self._update_thread.is_alive()
            and self._update_thread is not threading.current_thread()
        ):
            self._update_thread.join(timeout=1.0)

    def close(self):
        """Stop playback and release VLC resources."""
        self.stop()
        if self.media is not None:
            self.media.release()
            self.media = None
        self.player.release()

    def get_current_time(self):
        """
        Get the current playback position in seconds.

        Returns:
            Current position in seconds
        """
        time_ms = self.player.get_time()
        return time_ms / 1000 if time_ms >= 0 else 0

    def get_duration(self):
        """
        Get the total duration in seconds.

        Returns:
            Total duration in seconds
        """
        length_ms = self.player.get_length()
        return length_ms / 1000 if length_ms > 0 else 0

    def is_currently_playing(self):
        """
        Check if player is currently playing (not paused or stopped).

        Returns:
            True if playing, False otherwise
        """
        return self._state is PlaybackState.PLAYING

    def _set_state(self, new_state: PlaybackState) -> None:
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        if self._state_change_callback:
            try:
                self._state_change_callback(old_state, new_state)
            except Exception:
                logger.exception("Error in state change callback")
