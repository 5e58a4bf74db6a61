"""Project constants."""

PROJECT_NAME = "expvar-proxy"
PROJECT_DESCRIPTION = "Serve Go expvar JSON endpoints in the Prometheus text format"
DEFAULT_LISTEN_ADDR = "127.0.0.1:8000"
DEFAULT_TIMEOUT = "30s"
DEFAULT_SERVER_THREADS = 16
EXPOSITION_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"
