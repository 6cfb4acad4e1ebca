from .process_video_task import process_video_task
from .import_youtube_task import import_youtube_task
from .transcribe_video_task import transcribe_video_task
from .analyze_video_task import analyze_video_task
from .export_clip_task import export_clip_task

__all__ = (
    "process_video_task",
    "import_youtube_task",
    "transcribe_video_task",
    "analyze_video_task",
    "export_clip_task",
)
