"""Delivery logging for outbound webhook calls."""

import json
import os
import time
from datetime import datetime
from functools import wraps


def _write_entry(log_dir: str, log_entry: dict) -> None:
    if not os.access(log_dir, os.W_OK) and os.path.exists(log_dir):
        log_dir = "/tmp/logs"
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        log_dir = "/tmp/logs"
        os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "webhook_calls.log")

    with open(log_path, "a") as f:
        f.write(json.dumps(log_entry) + "\n")


def log_delivery(func):
    """
    Decorator to log webhook deliveries with timing and outcome.

    Wraps ``(self, endpoint, payload)`` methods returning a ``requests.Response`` and
    appends one JSON line per call to ``{log_dir}/webhook_calls.log``:
    {"ts": timestamp, "endpoint": name, "latency_ms": X, "status_code": Y}

    The log directory is ``self.log_dir`` when set, else ``WEBHOOK_LOG_DIR``, else
    ``logs``.
    """

    @wraps(func)
    def wrapper(self, endpoint, payload, *args, **kwargs):
        log_dir = getattr(self, "log_dir", None) or os.getenv("WEBHOOK_LOG_DIR", "logs")
        start_time = time.time()

        try:
            response = func(self, endpoint, payload, *args, **kwargs)
        except Exception as e:
            latency_ms = int((time.time() - start_time) * 1000)
            _write_entry(
                log_dir,
                {
                    "ts": datetime.now().isoformat(),
                    "endpoint": endpoint,
                    "latency_ms": latency_ms,
                    "status_code": None,
                    "error": str(e),
                    "status": "failed",
                },
            )
            raise

        latency_ms = int((time.time() - start_time) * 1000)
        log_entry = {
            "ts": datetime.now().isoformat(),
            "endpoint": endpoint,
            "latency_ms": latency_ms,
            "status_code": getattr(response, "status_code", None),
        }
        if "count" in payload:
            log_entry["count"] = payload["count"]
        _write_entry(log_dir, log_entry)

        return response

    return wrapper
