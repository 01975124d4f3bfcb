"""
Track catalog.

Maps the track ids held by the queue to playable files and display text.
The catalog is kept in a JSON file so ids stay stable between runs.
"""
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..config import AUDIO_EXTENSIONS

logger = logging.getLogger("fsmp.catalog")


@dataclass
class Track:
    """A playable track known to the catalog."""

    track_id: int
    file_path: str
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[float] = None

    @property
    def display_title(self) -> str:
        """Return the title, falling back to the file name."""
        return self.title or Path(self.file_path).stem

    @property
    def display_artist(self) -> str:
        return self.artist or "Unknown Artist"


class TrackCatalog:
    """Registry of tracks keyed by id."""

    def __init__(self, catalog_file: Optional[Union[str, Path]] = None):
        self.catalog_file = Path(catalog_file) if catalog_file else None
        self._tracks: Dict[int, Track] = {}
        self._next_id = 1
        if self.catalog_file:
            self.load()

    def load(self) -> None:
        """Load tracks from the catalog file."""
        try:
            if self.catalog_file and self.catalog_file.exists():
                with open(self.catalog_file, "r", encoding="utf-8") as f:
                    for entry in json.load(f):
                        self.add(Track(**entry))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Error loading catalog %s: %s", self.catalog_file, e)
            self._tracks = {}
            self._next_id = 1

    def save(self) -> bool:
        """Save tracks to the catalog file."""
        if not self.catalog_file:
            return False
        try:
            self.catalog_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.catalog_file, "w", encoding="utf-8") as f:
                json.dump([asdict(track) for track in self._tracks.values()], f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error("Error saving catalog %s: %s", self.catalog_file, e)
            return False

    def add(self, track: Track) -> Track:
        """Register a track, replacing any track with the same id."""
        self._tracks[track.track_id] = track
        self._next_id = max(self._next_id, track.track_id + 1)
        return track

    def add_files(self, paths: Iterable[str]) -> List[int]:
        """
        Register audio files.

        Files already in the catalog keep their id. Paths without a
        supported audio extension are skipped.

        Args:
            paths: File paths in queue order

        Returns:
            The track ids, in the same order
        """
        known = {track.file_path: track.track_id for track in self._tracks.values()}
        ids = []
        for path in paths:
            if Path(path).suffix.lower() not in AUDIO_EXTENSIONS:
                continue
            file_path = str(Path(path).resolve())
            if file_path not in known:
                known[file_path] = self.add(Track(track_id=self._next_id, file_path=file_path)).track_id
            ids.append(known[file_path])
        return ids

    def get_by_id(self, track_id: int) -> Optional[Track]:
        return self._tracks.get(track_id)

    def all(self) -> List[Track]:
        return list(self._tracks.values())

    def __len__(self) -> int:
        return len(self._tracks)
