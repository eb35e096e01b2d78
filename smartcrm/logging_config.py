"""
Structured logging for the SmartCRM API and its RQ worker.

configure_logging() is called once from create_app() (service 'api') and once
from worker.py (service 'worker'). Every record is tagged with the service
name, and records emitted while handling a Flask request also carry the HTTP
method and path, so API and worker lines can be told apart in one log drain.

Environment variables:
    LOG_LEVEL   Python log level name (default: INFO)
    LOG_FORMAT  "text" (default) or "json"
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import has_request_context, request


class ServiceContextFilter(logging.Filter):
    """Stamps records with the service name and, inside a request, method/path."""

    def __init__(self, service):
        super().__init__()
        self.service = service

    def filter(self, record):
        record.service = self.service
        if has_request_context():
            record.http_method = request.method
            record.http_path = request.path
        else:
            record.http_method = None
            record.http_path = None
        return True


class JSONFormatter(logging.Formatter):
    """Single-line JSON log formatter for the platform log drain."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'service': getattr(record, 'service', None),
            'logger': record.name,
            'message': record.getMessage(),
        }
        if getattr(record, 'http_path', None):
            entry['method'] = record.http_method
            entry['path'] = record.http_path
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


# openai pulls in httpx/httpcore; rq.worker logs every job heartbeat
_NOISY_LOGGERS = [
    'urllib3',
    'openai',
    'httpcore',
    'httpx',
    'rq.worker',
]


def configure_logging(app=None, service=None):
    """Set up the root logger. `service` defaults to 'api' with an app, else 'worker'."""
    service = service or ('api' if app is not None else 'worker')
    level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)

    log_format = os.getenv('LOG_FORMAT', 'text').lower()

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers to avoid duplicates on re-init
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ServiceContextFilter(service))

    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            '[%(asctime)s] %(levelname)s smartcrm-%(service)s %(name)s: %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))

    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
