"""
fsmp - a file-system music player.

Play local audio files from the terminal with a persistent queue,
shuffle and repeat.
"""

__version__ = "1.0.0"
__license__ = "GPL-3.0"
__description__ = "Play local audio files from the terminal"

__all__ = ["__version__", "__license__", "__description__"]
