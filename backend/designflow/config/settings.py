"""Runtime settings for designflow.

Settings are 12-factor compliant and pull configuration from environment variables. Defaults
are suitable for local development and unit tests only.
"""

from __future__ import annotations

import os
from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parent.parent.parent

env = environ.Env(
    LOG_LEVEL=(str, "INFO"),
    RECORD_STORE=(str, "memory"),
    OBJECT_STORAGE=(str, "memory"),
    CHANGE_FEED=(str, "memory"),
    SESSION_PROVIDER=(str, "static"),
    BACKEND_URL=(str, "http://localhost:54321"),
    BACKEND_API_KEY=(str, ""),
    BACKEND_ACCESS_TOKEN=(str, ""),
    BACKEND_TIMEOUT_SECONDS=(float, 30.0),
    RECORD_COLLECTION=(str, "desains"),
    DELIVERABLE_BUCKET=(str, "hasil_desain"),
    REDIS_URL=(str, "redis://localhost:6379/0"),
    CHANGE_FEED_CHANNEL_PREFIX=(str, "changes"),
    CHANGE_FEED_POLL_SECONDS=(float, 1.0),
    S3_ENDPOINT_URL=(str, ""),
    S3_REGION=(str, "us-east-1"),
    S3_PUBLIC_BASE_URL=(str, ""),
    S3_USE_SSL=(bool, True),
    SEARCH_DEBOUNCE_SECONDS=(float, 0.5),
    MESSAGE_LOCALE=(str, "id"),
)

environ.Env.read_env(env_file=os.environ.get("DESIGNFLOW_ENV_FILE", BASE_DIR / ".env"))

LOG_LEVEL = env("LOG_LEVEL")

RECORD_STORE = env("RECORD_STORE")
OBJECT_STORAGE = env("OBJECT_STORAGE")
CHANGE_FEED = env("CHANGE_FEED")
SESSION_PROVIDER = env("SESSION_PROVIDER")

BACKEND_URL = env("BACKEND_URL")
BACKEND_API_KEY = env("BACKEND_API_KEY")
BACKEND_ACCESS_TOKEN = env("BACKEND_ACCESS_TOKEN")
BACKEND_TIMEOUT_SECONDS = env.float("BACKEND_TIMEOUT_SECONDS")

RECORD_COLLECTION = env("RECORD_COLLECTION")
DELIVERABLE_BUCKET = env("DELIVERABLE_BUCKET")

REDIS_URL = env("REDIS_URL")
CHANGE_FEED_CHANNEL_PREFIX = env("CHANGE_FEED_CHANNEL_PREFIX")
CHANGE_FEED_POLL_SECONDS = env.float("CHANGE_FEED_POLL_SECONDS")

S3_ENDPOINT_URL = env("S3_ENDPOINT_URL") or None
S3_REGION = env("S3_REGION")
S3_PUBLIC_BASE_URL = env("S3_PUBLIC_BASE_URL")
S3_USE_SSL = env.bool("S3_USE_SSL")

SEARCH_DEBOUNCE_SECONDS = env.float("SEARCH_DEBOUNCE_SECONDS")
MESSAGE_LOCALE = env("MESSAGE_LOCALE")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "structured": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "structured",
        }
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}
