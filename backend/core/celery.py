import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

app = Celery("clipstudio")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Uma fila por etapa do pipeline
app.conf.task_queues = {
    "video.probe": {"exchange": "video", "routing_key": "probe"},
    "video.transcribe": {"exchange": "video", "routing_key": "transcribe"},
    "video.analyze": {"exchange": "video", "routing_key": "analyze"},
    "clip.export": {"exchange": "clip", "routing_key": "export"},
}

# Roteamento de tasks para filas específicas
app.conf.task_routes = {
    "clips.tasks.process_video_task": {"queue": "video.probe"},
    "clips.tasks.import_youtube_task": {"queue": "video.probe"},
    "clips.tasks.transcribe_video_task": {"queue": "video.transcribe"},
    "clips.tasks.analyze_video_task": {"queue": "video.analyze"},
    "clips.tasks.export_clip_task": {"queue": "clip.export"},
}

# Configurações gerais
app.conf.task_acks_late = True
app.conf.worker_prefetch_multiplier = 1
app.conf.task_time_limit = 30 * 60  # 30 minutos por etapa
app.conf.task_soft_time_limit = 25 * 60  # 25 minutos (aviso antes do hard limit)
