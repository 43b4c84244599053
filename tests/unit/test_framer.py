"""
Unit tests for LineFramer and FramerWorker.

Tests cover:
- Splitting on the default CRLF delimiter
- Leftmost-delimiter selection with several delimiters
- Tie-breaking by configuration order
- Buffering of partial lines across feeds
- Worker thread behavior and fatal read errors
"""

import queue
from unittest.mock import MagicMock

import pytest

from iotmodem.core.exceptions import SerialPortError
from iotmodem.core.framer import CRLF, Frame, FramerWorker, LineFramer
from tests.fakes import FakeTransport, wait_until


def texts(frames):
    return [f.text for f in frames]


class TestLineFramer:
    """Test LineFramer token splitting."""

    def test_default_delimiter_is_crlf(self):
        framer = LineFramer()
        frames = framer.feed(b"204080813324647\r\nOK\r\n")
        assert texts(frames) == ["204080813324647", "OK"]
        assert all(f.delimiter == b"\r\n" for f in frames)
        assert framer.pending == b""

    def test_empty_tokens_are_emitted(self):
        framer = LineFramer([CRLF])
        assert texts(framer.feed(b"\r\nOK\r\n")) == ["", "OK"]

    def test_partial_line_is_buffered(self):
        framer = LineFramer([CRLF])
        assert framer.feed(b"20408081") == []
        assert framer.pending == b"20408081"
        assert texts(framer.feed(b"3324647\r")) == []
        assert texts(framer.feed(b"\nOK\r\n")) == ["204080813324647", "OK"]

    def test_leftmost_delimiter_wins(self):
        framer = LineFramer([CRLF, ">"])
        frames = framer.feed(b"\r\n> ")
        assert texts(frames) == ["", ""]
        assert [f.delimiter for f in frames] == [b"\r\n", b">"]
        assert framer.pending == b" "

    def test_later_configured_delimiter_can_come_first_in_stream(self):
        framer = LineFramer([CRLF, ">"])
        frames = framer.feed(b"abc>def\r\n")
        assert frames == [Frame(b"abc", b">"), Frame(b"def", b"\r\n")]

    def test_tie_goes_to_earliest_configured_delimiter(self):
        framer = LineFramer(["\r", "\r\n"])
        frames = framer.feed(b"x\r\ny")
        assert frames == [Frame(b"x", b"\r")]
        assert framer.pending == b"\ny"

        framer = LineFramer(["\r\n", "\r"])
        frames = framer.feed(b"x\r\ny")
        assert frames == [Frame(b"x", b"\r\n")]
        assert framer.pending == b"y"

    def test_multibyte_delimiter_split_across_feeds(self):
        framer = LineFramer(["SEP"])
        assert framer.feed(b"oneSE") == []
        assert texts(framer.feed(b"Ptwo")) == ["one"]
        assert framer.pending == b"two"

    @pytest.mark.parametrize("delimiters, stream", [
        ([CRLF], b"\r\n204080813324647\r\n\r\nOK\r\nRDY"),
        ([CRLF, ">"], b"AT+QISEND=0,5\r\n> hello\r\n\r\nSEND OK\r\n"),
        (["\r", "\r\n"], b"x\r\ny\r\r\n\nz"),
        (["\r\n", "\r"], b"x\r\ny\r\r\n\nz"),
        (["SEP"], b"oneSEPtwoSESEPSEthree"),
        (["SEP", "EP", "P"], b"aSEPbEPcPdSSEEPP"),
    ])
    @pytest.mark.parametrize("chunk", [None, 1, 3])
    def test_round_trip_and_no_delimiter_in_payload(self, delimiters, stream, chunk):
        framer = LineFramer(delimiters)
        if chunk is None:
            frames = framer.feed(stream)
        else:
            frames = []
            for i in range(0, len(stream), chunk):
                frames.extend(framer.feed(stream[i:i + chunk]))

        encoded = [d.encode('utf-8') for d in delimiters]
        rebuilt = b"".join(f.payload + f.delimiter for f in frames) + framer.pending
        assert rebuilt == stream
        for frame in frames:
            assert frame.delimiter in encoded
            assert not any(d in frame.payload for d in encoded)

    def test_invalid_utf8_is_replaced(self):
        framer = LineFramer()
        frames = framer.feed(b"\xffOK\r\n")
        assert frames[0].text == "\ufffdOK"

    def test_requires_delimiters(self):
        with pytest.raises(ValueError):
            LineFramer([])
        with pytest.raises(ValueError):
            LineFramer([CRLF, ""])


class TestFramerWorker:
    """Test the framer thread."""

    def test_pushes_lines_in_order(self):
        transport = FakeTransport()
        output = queue.Queue(maxsize=10)
        worker = FramerWorker(transport, LineFramer(), output, MagicMock())
        worker.start()
        try:
            transport.feed(b"first\r\nsec")
            transport.feed(b"ond\r\n")
            assert output.get(timeout=1.0) == "first"
            assert output.get(timeout=1.0) == "second"
        finally:
            worker.stop()
            worker.join(timeout=1.0)
        assert not worker.is_alive()

    def test_blocks_when_output_full(self):
        transport = FakeTransport()
        output = queue.Queue(maxsize=1)
        worker = FramerWorker(transport, LineFramer(), output, MagicMock(), put_interval=0.01)
        worker.start()
        try:
            transport.feed(b"a\r\nb\r\n")
            assert wait_until(output.full)
            assert output.get(timeout=1.0) == "a"
            assert output.get(timeout=1.0) == "b"
        finally:
            worker.stop()
            worker.join(timeout=1.0)

    def test_read_error_reported_and_thread_exits(self):
        transport = FakeTransport()
        transport.read_error = SerialPortError("Failed to read from port", transport.port)
        on_fatal = MagicMock()
        worker = FramerWorker(transport, LineFramer(), queue.Queue(), on_fatal)
        worker.start()
        worker.join(timeout=1.0)

        assert not worker.is_alive()
        on_fatal.assert_called_once_with(transport.read_error)

    def test_read_error_after_stop_not_reported(self):
        transport = FakeTransport()
        on_fatal = MagicMock()
        worker = FramerWorker(transport, LineFramer(), queue.Queue(), on_fatal)
        worker.start()
        worker.stop()
        transport.close()
        worker.join(timeout=1.0)

        assert not worker.is_alive()
        on_fatal.assert_not_called()

    def test_thread_is_named_after_port(self):
        transport = FakeTransport(port="/dev/ttyUSB3")
        worker = FramerWorker(transport, LineFramer(), queue.Queue(), MagicMock())
        assert worker.name == "framer-/dev/ttyUSB3"
        assert worker.daemon

    def test_held_lines_counts_unqueued_frames(self):
        transport = FakeTransport()
        output = queue.Queue(maxsize=2)
        worker = FramerWorker(transport, LineFramer(), output, MagicMock(), put_interval=0.01)
        assert worker.held_lines == 0
        worker.start()
        try:
            transport.feed(b"a\r\nb\r\nc\r\nd\r\ne\r\n")
            assert wait_until(lambda: output.full() and worker.held_lines == 3)

            assert [output.get(timeout=1.0) for _ in range(5)] == ["a", "b", "c", "d", "e"]
            assert wait_until(lambda: worker.held_lines == 0)
        finally:
            worker.stop()
            worker.join(timeout=1.0)
