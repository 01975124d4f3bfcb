"""Test setup.

The audio player module imports python-vlc, which needs the native libvlc
library at import time. When it is not available a stand-in module is
registered so the rest of the package can still be imported; tests never
talk to a real VLC instance.
"""

import sys
import random
from types import SimpleNamespace

import pytest


def _ensure_vlc_importable() -> None:
    try:
        import vlc  # noqa: F401
    except Exception:
        sys.modules["vlc"] = SimpleNamespace(
            Instance=lambda *args: None,
            State=SimpleNamespace(Playing="Playing", Ended="Ended", Error="Error"),
        )


_ensure_vlc_importable()


@pytest.fixture
def rng():
    return random.Random(1234)
