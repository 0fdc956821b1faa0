#!/usr/bin/env python3
"""
Example script demonstrating how to use the metrics emitter
with the web app.
"""
import logging
import time

import psutil

import metrics_emitter
from metrics_emitter import Dimension, MetricEmitter, MetricOptions
from metrics_emitter import config

logger = logging.getLogger(__name__)


def log_flush_result(error):
    """Log failed batches, the emitter itself does not."""
    if error is not None:
        logger.error("Failed to send metrics batch: %s", error)


def collect_system_metrics(emitter: MetricEmitter) -> None:
    """Record basic system metrics."""
    # CPU usage, summarized between flushes
    cpu_percent = psutil.cpu_percent(interval=1)
    emitter.summary_put(cpu_percent, 'cpu_usage')
    print(f"Recorded CPU usage: {cpu_percent}%")

    # Memory usage
    memory_percent = psutil.virtual_memory().percent
    emitter.put(memory_percent, 'memory_usage')
    print(f"Recorded memory usage: {memory_percent}%")

    # Disk usage, sent one time in ten
    disk_percent = psutil.disk_usage('/').percent
    emitter.sample(disk_percent, 'disk_usage', [Dimension('mount', '/')], 0.1)


def main():
    """Main function to run the example."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    metrics_emitter.initialize(server_url=config.SERVER_URL, api_key=config.API_KEY)

    print("Starting metrics collection example...")
    options = MetricOptions(include_timestamp=True, on_flush_complete=log_flush_result)
    with MetricEmitter('laptop', '%', [Dimension('host', config.SOURCE_NAME)], options) as emitter:
        if not emitter.backend_client.health_check():
            print("Warning: Metrics server is not accessible. Batches will fail.")

        # Collect metrics every 5 seconds for 1 minute
        for _ in range(12):
            try:
                collect_system_metrics(emitter)
            except Exception as e:
                print(f"Error collecting metrics: {e}")

            time.sleep(5)

        if emitter.has_pending_points():
            print("Sending remaining buffered metrics.")

    print("Metrics collection example completed.")


if __name__ == "__main__":
    main()
