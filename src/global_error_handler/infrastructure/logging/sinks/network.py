# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Network Collector Sink.

Summary:
    Ships log events to a log-event collector (Seq-compatible raw ingestion
    endpoint) as compact JSON lines (CLEF) over HTTP using ``httpx``.

Design:
    * Request tasks only pay for a non-blocking put on a bounded queue
      (:class:`CollectorQueueHandler`). When the queue is full the record is
      dropped and counted.
    * A :class:`CollectorQueueListener` thread drains the queue into
      :class:`CollectorHandler`, which buffers records and POSTs them in
      batches of newline-separated events. A batch is sent when it is full or
      when the queue runs empty.
    * After a failed delivery the handler stops posting for
      ``retry_after_s`` seconds and drops what arrives meanwhile, so a dead
      collector cannot stall shutdown for longer than one request timeout.
    * :class:`CollectorQueueHandler` keeps the message template and the
      exception text as separate fields when records cross the queue.
    * The API key header is sent only when a key is configured.
    * Delivery failures are reported through ``logging.Handler.handleError``.

Wire format (one JSON object per line):
    @t   ISO-8601 UTC timestamp
    @mt  message template
    @m   rendered message
    @l   level name (Verbose, Debug, Information, Warning, Error, Fatal)
    @x   exception text, when present
    plus ``logger``, ``application``, ``request_id`` and structured fields.
"""

from __future__ import annotations

import copy
import json
import logging
import queue
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from logging.handlers import BufferingHandler, QueueHandler, QueueListener
from typing import Any, Final

import httpx

__all__ = [
    "API_KEY_HEADER",
    "CLEF_CONTENT_TYPE",
    "ClefFormatter",
    "CollectorHandler",
    "CollectorQueueHandler",
    "CollectorQueueListener",
    "NetworkSinkConfiguration",
]

API_KEY_HEADER: Final[str] = "X-Seq-ApiKey"
CLEF_CONTENT_TYPE: Final[str] = "application/vnd.serilog.clef"
_INGEST_PATH: Final[str] = "/api/events/raw?clef"
_TIMEOUT_S: Final[float] = 5.0


@dataclass(frozen=True)
class NetworkSinkConfiguration:
    """Configuration parameters for the collector sink.

    Attributes:
        server_url: Collector base URL.
        api_key: Optional API key.
        restricted_to_minimum_level: Handler threshold.
        batch_size: Records per POST at most.
        queue_size: Records waiting for delivery at most; extras are dropped.
        retry_after_s: Pause after a failed delivery.
    """

    server_url: str
    api_key: str | None = None
    restricted_to_minimum_level: int = logging.INFO
    batch_size: int = 100
    queue_size: int = 10_000
    retry_after_s: float = 5.0

    @property
    def ingest_url(self) -> str:
        """Absolute URL of the raw-events ingestion endpoint."""
        return self.server_url.rstrip("/") + _INGEST_PATH

    def __repr__(self) -> str:
        return (
            f"NetworkSinkConfiguration(server_url={self.server_url!r}, "
            f"api_key_set={self.api_key is not None}, "
            f"restricted_to_minimum_level={self.restricted_to_minimum_level}, "
            f"batch_size={self.batch_size}, queue_size={self.queue_size})"
        )


def _clef_level(levelno: int) -> str:
    if levelno >= logging.CRITICAL:
        return "Fatal"
    if levelno >= logging.ERROR:
        return "Error"
    if levelno >= logging.WARNING:
        return "Warning"
    if levelno >= logging.INFO:
        return "Information"
    if levelno >= logging.DEBUG:
        return "Debug"
    return "Verbose"


class ClefFormatter(logging.Formatter):
    """Render a record as one compact log-event JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        template = getattr(record, "message_template", None)
        if template is None:
            template = record.msg if isinstance(record.msg, str) else message
        payload: dict[str, Any] = {
            "@t": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "@mt": template,
            "@m": message,
            "@l": _clef_level(record.levelno),
            "logger": record.name,
        }
        if record.exc_info:
            payload["@x"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["@x"] = record.exc_text

        for attr in ("application", "request_id"):
            value = getattr(record, attr, None)
            if value:
                payload[attr] = value

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            for key, value in extra.items():
                # "@" prefixed keys are reserved by the format.
                payload[key.lstrip("@")] = value

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


class CollectorQueueHandler(QueueHandler):
    """Non-blocking queue handler for the collector sink.

    Preserves template and exception text across threads and counts the
    records dropped because the queue was full.
    """

    def __init__(self, records: queue.Queue[Any]) -> None:
        super().__init__(records)
        self.dropped = 0

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        exc_text = record.exc_text
        if record.exc_info:
            exc_text = logging.Formatter().formatException(record.exc_info)
        prepared = copy.copy(record)
        prepared.message = record.getMessage()
        prepared.message_template = record.msg if isinstance(record.msg, str) else prepared.message
        prepared.msg = prepared.message
        prepared.args = None
        prepared.exc_info = None
        prepared.exc_text = exc_text
        prepared.stack_info = None
        return prepared


class CollectorQueueListener(QueueListener):
    """Queue listener that flushes its handlers whenever the queue runs empty."""

    def handle(self, record: logging.LogRecord) -> None:
        super().handle(record)
        if self.queue.empty():
            for handler in self.handlers:
                handler.flush()

    def enqueue_sentinel(self) -> None:
        # Blocking put: the queue may be full while the listener drains it.
        self.queue.put(self._sentinel)


class CollectorHandler(BufferingHandler):
    """Logging handler POSTing batches of records to the collector.

    Records are buffered until ``batch_size`` is reached or :meth:`flush` is
    called; :meth:`close` sends whatever is left.

    Args:
        config: Collector sink parameters.
        client: Optional pre-built ``httpx.Client``; owned and closed by the handler.
    """

    def __init__(
        self,
        config: NetworkSinkConfiguration,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(capacity=config.batch_size)
        self.setLevel(config.restricted_to_minimum_level)
        self.config = config
        headers = {"Content-Type": CLEF_CONTENT_TYPE}
        if config.api_key:
            headers[API_KEY_HEADER] = config.api_key
        self._headers = headers
        self._client = client or httpx.Client(timeout=_TIMEOUT_S)
        self._suspended_until = 0.0
        self.dropped = 0
        self.setFormatter(ClefFormatter())

    def flush(self) -> None:
        self.acquire()
        try:
            batch, self.buffer = self.buffer, []
            if batch:
                self._deliver(batch)
        finally:
            self.release()

    def _deliver(self, batch: list[logging.LogRecord]) -> None:
        if time.monotonic() < self._suspended_until:
            self.dropped += len(batch)
            return
        try:
            body = "".join(self.format(record) + "\n" for record in batch)
            response = self._client.post(
                self.config.ingest_url,
                content=body.encode("utf-8"),
                headers=self._headers,
            )
            response.raise_for_status()
        except Exception:
            self._suspended_until = time.monotonic() + self.config.retry_after_s
            self.dropped += len(batch)
            self.handleError(batch[-1])

    def close(self) -> None:
        try:
            super().close()
        finally:
            self._client.close()
