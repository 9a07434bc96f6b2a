# Gunicorn configuration for the reqtools example service
#   gunicorn app:app

import multiprocessing
import os

bind = os.environ.get("REQTOOLS_BIND", "127.0.0.1:8000")

# Uploads and JSON decoding block the worker; sync workers, one request each
worker_class = "sync"
workers = int(os.environ.get("REQTOOLS_WORKERS", multiprocessing.cpu_count() * 2 + 1))

# A 1GiB upload over a slow link needs far more than the 30s default
timeout = int(os.environ.get("REQTOOLS_TIMEOUT", 300))
graceful_timeout = 30

max_requests = 1000
max_requests_jitter = 50

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("REQTOOLS_LOG_LEVEL", "info")

# Route the library's debug records through gunicorn's error log handler
logconfig_dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "generic": {
            "format": "%(asctime)s [%(process)d] [%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "generic",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "reqtools": {
            "level": os.environ.get("REQTOOLS_LIBRARY_LOG_LEVEL", "WARNING"),
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

proc_name = "reqtools"
forwarded_allow_ips = "127.0.0.1"
preload_app = True
