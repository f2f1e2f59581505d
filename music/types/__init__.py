from .artist import Artist
from .song import Song

__all__ = ["Artist", "Song"]
