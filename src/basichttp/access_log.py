"""
=============================================================================
ACCESS LOG
=============================================================================

One log line per served request, written to the "basichttp.access" logger
after the response has gone out.

Two formats:

    text   127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /" 200 22 0.41ms
    json   {"request_id": "a1b2c3d4", "method": "GET", "path": "/", ...}

The access logger is a namespaced stdlib logger, so an embedding app can
route it on its own:

    logging.getLogger("basichttp.access").addHandler(file_handler)

Requests that fail to parse never reach this log; the server writes a
WARNING on its own logger for those instead.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("basichttp.access")


@dataclass
class RequestLog:
    """
    Structured log entry for a request.

    Fields:
        request_id:     Connection id, matching the "[id]" log prefix
        method:         HTTP method (GET, POST, etc.)
        path:           Request target
        client_ip:      Client's IP address
        user_agent:     Browser/client identifier
        status_code:    HTTP response code
        content_length: Response body size in bytes
        duration_ms:    Time from accept to response written
        timestamp:      When the request was processed
    """

    request_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Format in the spirit of the Apache combined log format."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Writes access log entries.

    Successful responses log at INFO, error statuses (4xx/5xx) at WARNING.
    """

    def __init__(self, log_format: str = "text"):
        """
        Args:
            log_format: "text" (human readable) or "json" (for log
                        aggregators).
        """
        self.log_format = log_format

    def log(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        duration_ms: float,
        request_id: str = "-",
    ) -> RequestLog:
        """
        Build and emit the entry for one request/response pair.

        Returns:
            The RequestLog that was written.
        """
        entry = RequestLog(
            request_id=request_id,
            method=str(request.method),
            path=request.path,
            client_ip=request.client_address[0] or "-",
            user_agent=request.get_header("User-Agent", "-"),
            status_code=int(response.status),
            content_length=len(response.body_bytes),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        level = logging.WARNING if response.status.is_error else logging.INFO
        if self.log_format == "json":
            logger.log(level, json.dumps(entry.to_dict()))
        else:
            logger.log(level, entry.to_text())

        return entry
