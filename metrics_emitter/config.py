"""
Configuration settings for the metrics emitter.
"""
import os
import socket

# Server configuration
SERVER_URL = os.getenv('METRICS_SERVER_URL', 'http://localhost:8000/')
API_KEY = os.getenv('METRICS_API_KEY', '')

# Source configuration
SOURCE_NAME = os.getenv('METRICS_SOURCE_NAME', socket.gethostname())

# HTTP client configuration
REQUEST_TIMEOUT = int(os.getenv('METRICS_REQUEST_TIMEOUT', '30'))  # seconds
MAX_RETRIES = int(os.getenv('METRICS_MAX_RETRIES', '3'))
RETRY_DELAY = int(os.getenv('METRICS_RETRY_DELAY', '5'))  # seconds
MAX_SEND_WORKERS = int(os.getenv('METRICS_MAX_SEND_WORKERS', '4'))

# Emitter defaults
POINT_FLUSH_INTERVAL_MS = 5000
SUMMARY_FLUSH_INTERVAL_MS = 10000
# Per-call item limit of the ingestion API
MAX_BATCH_CAPACITY = 20

# Logging configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
