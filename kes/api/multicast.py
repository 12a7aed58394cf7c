"""One-to-many writers for streaming log events to subscribers."""

from __future__ import annotations

import threading
from typing import Any, Optional, Tuple, Union

from kes.api.messages import ErrorLogEvent, encode


class Multicast:
    """A one-to-many writer whose members can change at any time.

    Members are objects with a write method. Adding, removing and
    writing may happen from several threads concurrently.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._writers: Tuple[Any, ...] = ()

    def __len__(self) -> int:
        return len(self._writers)

    def add(self, writer: Any) -> None:
        """Add writer; future writes will reach it. Adding twice does nothing."""
        if writer is None:
            return
        with self._lock:
            if any(w is writer for w in self._writers):
                return
            self._writers = (writer,) + self._writers

    def remove(self, writer: Any) -> None:
        """Remove writer; future writes will no longer reach it."""
        if writer is None:
            return
        with self._lock:
            if not any(w is writer for w in self._writers):
                return
            self._writers = tuple(w for w in self._writers if w is not writer)

    def write(self, data: Union[bytes, str]) -> int:
        """Write data to every current member.

        Every member is written to; afterwards the first error, if
        any, is raised. A member that accepts fewer bytes than given
        counts as a short write. Returns the number of bytes written,
        or 0 when there are no members.
        """
        writers = self._writers
        if not writers:
            return 0

        first_error: Optional[BaseException] = None
        for writer in writers:
            error: Optional[BaseException] = None
            try:
                written = writer.write(data)
            except Exception as exc:
                error = exc
            else:
                if written is not None and written < len(data):
                    error = OSError("short write")
            if first_error is None and error is not None:
                first_error = error
        if first_error is not None:
            raise first_error
        return len(data)


class LogWriter:
    """Wraps a binary writer and sends each write as an error log event.

    Each write becomes one JSON line; the writer is flushed after
    every event if it can be.
    """

    def __init__(self, writer: Any) -> None:
        self._writer = writer
        flush = getattr(writer, "flush", None)
        self._flush = flush if callable(flush) else None

    def write(self, data: Union[bytes, str]) -> int:
        """Encode data as an error log event and return its length."""
        if not data:
            return 0
        size = len(data)
        if isinstance(data, str):
            text = data
        else:
            text = bytes(data).decode("utf-8", "replace")
        if text.endswith("\n"):  # drop the newline added by loggers
            text = text[:-1]

        self._writer.write(encode(ErrorLogEvent(message=text)) + b"\n")
        if self._flush is not None:
            self._flush()
        return size