"""
JSON file store for the queue state.
"""
import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from .queue_state import QueueSnapshot

logger = logging.getLogger("fsmp.queue.store")


class QueueStateStore:
    """Loads and saves a QueueSnapshot to a single JSON file."""

    def __init__(self, file_path: Union[str, Path]):
        if not file_path:
            raise ValueError("file_path is required")
        self.file_path = Path(file_path)

    def load(self) -> Optional[QueueSnapshot]:
        """
        Load the saved queue state.

        Returns:
            The snapshot, or None when there is nothing usable on disk
        """
        try:
            if not self.file_path.exists():
                return None
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return QueueSnapshot.from_dict(data)
        except Exception as e:
            # Decode errors, bad shapes, unreadable files and over-deep nesting all mean "nothing saved"
            logger.warning("Ignoring unreadable queue state %s: %s", self.file_path, e)
            return None

    def save(self, snapshot: QueueSnapshot) -> None:
        """
        Save the queue state.

        The JSON is written next to the target and then moved over it, so a
        crash never leaves a half-written file behind.

        Args:
            snapshot: State to persist
        """
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.file_path.with_name(self.file_path.name + ".tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_dict(), f, indent=2)
            os.replace(temp_path, self.file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise
        logger.debug("Queue state saved to %s", self.file_path)
