import os
import tempfile

from .settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'clips-tests',
    }
}

CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'
CELERY_TASK_ALWAYS_EAGER = False

GEMINI_API_KEY = None
CLIP_DETECTION_BACKEND = 'fallback'

_TEST_MEDIA_ROOT = tempfile.mkdtemp(prefix='clips-tests-')
VIDEO_UPLOADS_DIR = os.path.join(_TEST_MEDIA_ROOT, 'videos')
THUMBNAILS_DIR = os.path.join(_TEST_MEDIA_ROOT, 'thumbnails')
CLIP_EXPORTS_DIR = os.path.join(_TEST_MEDIA_ROOT, 'exports')
CLIP_SUBTITLES_DIR = os.path.join(_TEST_MEDIA_ROOT, 'subtitles')
AUDIO_TMP_DIR = os.path.join(_TEST_MEDIA_ROOT, 'audio')
