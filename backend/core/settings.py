from pathlib import Path
import os
from urllib.parse import urlparse
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(os.path.join(BASE_DIR, '.env'))

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-change-me')
DEBUG = os.getenv('DJANGO_DEBUG', 'true').lower() == 'true'

ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'corsheaders',
    'clips',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'core.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'core.wsgi.application'

DATABASE_URL = os.getenv('DATABASE_URL')

if DATABASE_URL:
    parsed_url = urlparse(DATABASE_URL)
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': (parsed_url.path.lstrip('/') or ''),
            'USER': parsed_url.username or '',
            'PASSWORD': parsed_url.password or '',
            'HOST': parsed_url.hostname or '',
            'PORT': str(parsed_url.port) if parsed_url.port else '',
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DB_NAME', 'clipstudio'),
            'USER': os.getenv('DB_USER', 'clipstudio'),
            'PASSWORD': os.getenv('DB_PASSWORD', 'clipstudio'),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
        }
    }

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True


STATIC_URL = 'static/'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Autenticação fica fora deste serviço: o tenant chega no request e é confiável
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'UNAUTHENTICATED_USER': None,
}

# Celery Configuration
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://127.0.0.1:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://127.0.0.1:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = 'UTC'
CELERY_WORKER_CONCURRENCY = int(os.getenv('CELERY_WORKER_CONCURRENCY', '2'))


# CORS Configuration
CORS_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = [
    "accept",
    "accept-encoding",
    "authorization",
    "content-type",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-requested-with",
    "x-organization-id",
]

# FFmpeg / ffprobe
FFMPEG_PATH = os.getenv('FFMPEG_PATH', 'ffmpeg')
FFPROBE_PATH = os.getenv('FFPROBE_PATH', 'ffprobe')
FFMPEG_TIMEOUT = int(os.getenv('FFMPEG_TIMEOUT', '900'))
FFPROBE_TIMEOUT = int(os.getenv('FFPROBE_TIMEOUT', '30'))

# Diretórios de trabalho
VIDEO_UPLOADS_DIR = os.getenv('VIDEO_UPLOADS_DIR', str(MEDIA_ROOT / 'videos'))
THUMBNAILS_DIR = os.getenv('THUMBNAILS_DIR', str(MEDIA_ROOT / 'thumbnails'))
CLIP_EXPORTS_DIR = os.getenv('CLIP_EXPORTS_DIR', str(MEDIA_ROOT / 'exports'))
CLIP_SUBTITLES_DIR = os.getenv('CLIP_SUBTITLES_DIR', str(MEDIA_ROOT / 'subtitles'))
AUDIO_TMP_DIR = os.getenv('AUDIO_TMP_DIR', str(MEDIA_ROOT / 'audio'))

# Gemini API Configuration
GEMINI_API_KEY = os.getenv('GEMINI_API_KEY')
GEMINI_TRANSCRIPT_MODEL = os.getenv('GEMINI_TRANSCRIPT_MODEL', 'gemini-2.5-flash')
GEMINI_VIDEO_MODEL = os.getenv('GEMINI_VIDEO_MODEL', 'gemini-2.5-flash')
GEMINI_TEMPERATURE = float(os.getenv('GEMINI_TEMPERATURE', '0.4'))
GEMINI_CONTENT_MODEL = os.getenv('GEMINI_CONTENT_MODEL', 'gemini-2.5-flash')
GEMINI_CONTENT_TEMPERATURE = float(os.getenv('GEMINI_CONTENT_TEMPERATURE', '0.8'))
GEMINI_FILE_POLL_SECONDS = int(os.getenv('GEMINI_FILE_POLL_SECONDS', '5'))
GEMINI_FILE_POLL_MAX_ATTEMPTS = int(os.getenv('GEMINI_FILE_POLL_MAX_ATTEMPTS', '120'))

# transcript | video | fallback
CLIP_DETECTION_BACKEND = os.getenv('CLIP_DETECTION_BACKEND', 'transcript')
MAX_CLIPS_PER_VIDEO = int(os.getenv('MAX_CLIPS_PER_VIDEO', '10'))

# Whisper tuning (optional)
WHISPER_MODEL = os.getenv('WHISPER_MODEL', 'small')
WHISPER_DEVICE = os.getenv('WHISPER_DEVICE')

# Etapas "em andamento" mais antigas que isso podem ser reiniciadas
STAGE_STALE_AFTER_MINUTES = int(os.getenv('STAGE_STALE_AFTER_MINUTES', '30'))

# Redis Cache Configuration
REDIS_URL = os.getenv('REDIS_URL', 'redis://127.0.0.1:6379/1')

CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            'CONNECTION_POOL_KWARGS': {'max_connections': 50},
        }
    }
}

# Sub-transcrição derivada de cada clip: 1 dia
CLIP_TRANSCRIPT_CACHE_TIMEOUT = int(os.getenv('CLIP_TRANSCRIPT_CACHE_TIMEOUT', str(86400)))

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'clips': {
            'handlers': ['console'],
            'level': os.getenv('CLIPS_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
