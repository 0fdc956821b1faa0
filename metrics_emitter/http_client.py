"""
HTTP client for sending metric batches to the ingestion server.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from retrying import retry

from . import config

logger = logging.getLogger(__name__)

FlushCallback = Callable[[Optional[BaseException]], None]


# Worth another attempt; HTTP status errors are final
TRANSIENT_ERRORS = (requests.ConnectionError, requests.Timeout)


def is_transient_error(exception: Exception) -> bool:
    return isinstance(exception, TRANSIENT_ERRORS)


class HttpBackendClient:
    """
    Backend client posting batches to the bulk metrics endpoint.

    send_batch() returns immediately; requests run on a thread pool and the
    outcome is reported to the callback exactly once per batch.
    """

    def __init__(
        self,
        server_url: Optional[str] = None,
        api_key: Optional[str] = None,
        source_name: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[int] = None,
        request_timeout: Optional[int] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize the backend client.

        Args:
            server_url (str, optional): URL of the metrics server. Defaults to config.SERVER_URL.
            api_key (str, optional): API key for authentication. Defaults to config.API_KEY.
            source_name (str, optional): Source name sent with every batch. Defaults to config.SOURCE_NAME.
            max_retries (int, optional): Maximum number of attempts. Defaults to config.MAX_RETRIES.
            retry_delay (int, optional): Delay between retries in seconds. Defaults to config.RETRY_DELAY.
            request_timeout (int, optional): Request timeout in seconds. Defaults to config.REQUEST_TIMEOUT.
            max_workers (int, optional): Concurrent requests allowed. Defaults to config.MAX_SEND_WORKERS.
        """
        self.server_url = server_url or config.SERVER_URL
        self.api_key = api_key if api_key is not None else config.API_KEY
        self.source_name = source_name or config.SOURCE_NAME
        self.max_retries = max_retries if max_retries is not None else config.MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else config.RETRY_DELAY
        self.request_timeout = request_timeout if request_timeout is not None else config.REQUEST_TIMEOUT
        self.executor = ThreadPoolExecutor(
            max_workers=max_workers or config.MAX_SEND_WORKERS,
            thread_name_prefix='metrics-send'
        )

    @property
    def bulk_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/api/metrics/bulk"

    def build_payload(self, namespace: str, data_points: Sequence[Any]) -> Dict[str, Any]:
        """
        Build the JSON body for a batch.

        Args:
            namespace (str): Namespace the metrics belong to
            data_points (sequence): DataPoint or StatisticsPoint records

        Returns:
            dict: The request body
        """
        return {
            'namespace': namespace,
            'source': self.source_name,
            'metrics': [point.to_dict() for point in data_points],
        }

    def _post_batch(self, payload: Dict[str, Any]) -> None:
        headers = {
            'Content-Type': 'application/json',
            'X-API-Key': self.api_key
        }

        @retry(
            retry_on_exception=is_transient_error,
            stop_max_attempt_number=max(1, self.max_retries),
            wait_fixed=self.retry_delay * 1000  # milliseconds
        )
        def _send_bulk_request():
            response = requests.post(
                self.bulk_url,
                json=payload,
                headers=headers,
                timeout=self.request_timeout
            )
            response.raise_for_status()

        _send_bulk_request()

    def _send(self, payload: Dict[str, Any], callback: FlushCallback) -> None:
        error = None
        try:
            self._post_batch(payload)
            logger.debug("Sent %d metrics to namespace %s", len(payload['metrics']), payload['namespace'])
        except Exception as e:
            logger.error("Failed to send metrics batch after %s attempts: %s", self.max_retries, str(e))
            error = e

        try:
            callback(error)
        except Exception as e:
            logger.error("Error in flush callback: %s", str(e))

    def send_batch(self, namespace: str, data_points: List[Any], callback: FlushCallback) -> None:
        """
        Send a batch asynchronously.

        Args:
            namespace (str): Namespace the metrics belong to
            data_points (list): Records to send, at most MAX_BATCH_CAPACITY of them
            callback (callable): Called with None on success or the exception on failure
        """
        payload = self.build_payload(namespace, data_points)
        self.executor.submit(self._send, payload, callback)

    @property
    def health_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/health"

    def health_check(self) -> bool:
        """Check the server's health endpoint once, without retries. True only on a 200 answer."""
        try:
            response = requests.get(
                self.health_url,
                headers={'X-API-Key': self.api_key},
                timeout=self.request_timeout
            )
        except requests.exceptions.RequestException as e:
            logger.debug("Health check against %s failed: %s", self.health_url, str(e))
            return False
        return response.status_code == 200

    def close(self, wait: bool = True) -> None:
        """Stop accepting batches; with wait=True, block until in-flight batches finish."""
        self.executor.shutdown(wait=wait)


# Process-wide settings for clients created by emitters
_client_config: Dict[str, Any] = {}


def initialize(**client_config) -> None:
    """
    Set the configuration used for backend clients created after this call.

    Args:
        **client_config: Keyword arguments for HttpBackendClient (server_url,
            api_key, source_name, max_retries, retry_delay, request_timeout,
            max_workers)
    """
    global _client_config
    _client_config = dict(client_config)


def create_default_client() -> HttpBackendClient:
    """
    Create a backend client from the settings given to initialize().

    Returns:
        HttpBackendClient: A new client
    """
    return HttpBackendClient(**_client_config)
