from .video import Video
from .transcript import Transcript
from .clip import Clip

__all__ = (
    "Video",
    "Transcript",
    "Clip",
)
