import io
import json

import pytest

from kes.api.messages import ErrorLogEvent, decode
from kes.api.multicast import LogWriter, Multicast


class Recorder:
    def __init__(self):
        self.chunks = []
        self.flushes = 0

    def write(self, data):
        self.chunks.append(data)
        return len(data)

    def flush(self):
        self.flushes += 1


class Failing:
    def write(self, data):
        raise OSError("broken pipe")


class Short:
    def write(self, data):
        return len(data) - 1


def test_empty_multicast_writes_nothing():
    m = Multicast()
    assert len(m) == 0
    assert m.write(b"data") == 0


def test_write_reaches_all_members():
    m = Multicast()
    first, second = io.BytesIO(), io.BytesIO()
    m.add(first)
    m.add(second)
    assert len(m) == 2
    assert m.write(b"event\n") == len(b"event\n")
    assert first.getvalue() == b"event\n"
    assert second.getvalue() == b"event\n"


def test_add_is_idempotent_and_ignores_none():
    m = Multicast()
    writer = io.BytesIO()
    m.add(writer)
    m.add(writer)
    m.add(None)
    assert len(m) == 1


def test_remove_stops_delivery():
    m = Multicast()
    kept, removed = Recorder(), Recorder()
    m.add(kept)
    m.add(removed)
    m.remove(removed)
    m.remove(Recorder())
    m.remove(None)
    assert len(m) == 1
    m.write(b"x")
    assert kept.chunks == [b"x"]
    assert removed.chunks == []


def test_failing_member_does_not_stop_others():
    m = Multicast()
    healthy = Recorder()
    m.add(healthy)
    m.add(Failing())
    with pytest.raises(OSError, match="broken pipe"):
        m.write(b"event")
    assert healthy.chunks == [b"event"]


def test_short_write_is_an_error():
    m = Multicast()
    m.add(Short())
    with pytest.raises(OSError, match="short write"):
        m.write(b"event")


def test_log_writer_encodes_event_lines():
    sink = Recorder()
    writer = LogWriter(sink)
    data = b"disk failure\n"
    assert writer.write(data) == len(data)
    assert len(sink.chunks) == 1
    line = sink.chunks[0]
    assert line.endswith(b"\n")
    assert decode(ErrorLogEvent, line) == ErrorLogEvent(message="disk failure")
    assert sink.flushes == 1


def test_log_writer_keeps_message_without_newline():
    sink = io.BytesIO()
    LogWriter(sink).write(b"no newline")
    assert json.loads(sink.getvalue()) == {"message": "no newline"}


def test_log_writer_ignores_empty_writes():
    sink = Recorder()
    assert LogWriter(sink).write(b"") == 0
    assert sink.chunks == []
    assert sink.flushes == 0


def test_log_writer_as_multicast_member():
    m = Multicast()
    sink = io.BytesIO()
    m.add(LogWriter(sink))
    m.write(b"key store unreachable\n")
    assert decode(ErrorLogEvent, sink.getvalue()).message == "key store unreachable"